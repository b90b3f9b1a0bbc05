"""Abstract key-value store interface.

The history cache keeps its whole collection as one serialized value under
one key, so a backend only needs get/set/delete on strings. Backends are
swappable without touching the cache or the CLI.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class BaseStore(ABC):
    """Local key-value persistence owned exclusively by codelens."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the value stored under ``key``, or None if absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, overwriting any previous value."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove ``key``. Deleting an absent key is not an error."""

    def close(self) -> None:
        """Release any resources held by the store (connections, file handles).

        Subclasses that need cleanup override this.
        Default is a no-op; callers may always call close().
        """
