"""In-memory store: history lasts only for the current process.

Selected with ``store: memory`` in .codelens.yml, e.g. on shared machines
where nothing should be written to disk.
"""

from __future__ import annotations

from codelens_store.base import BaseStore


class MemoryStore(BaseStore):
    def __init__(self):
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)
