"""Bounded, newest-first history of completed reviews.

The whole collection is one JSON array stored under HISTORY_KEY. Reading is
fail-safe: anything that does not parse back into HistoryItems is thrown
away wholesale and the key is erased. Writing is best-effort: a failed write
is logged and swallowed so it never interrupts the review that triggered it.
"""

from __future__ import annotations

import json
import logging

from codelens_store.base import BaseStore
from codelens_store.models import HistoryItem

logger = logging.getLogger(__name__)

HISTORY_KEY = "codeReviewHistory"
MAX_HISTORY = 50


class HistoryCache:
    def __init__(self, store: BaseStore, key: str = HISTORY_KEY, limit: int = MAX_HISTORY):
        self._store = store
        self._key = key
        self._limit = limit

    def load(self) -> list[HistoryItem]:
        """Return all items, newest first. Corrupt data yields [] and is erased."""
        try:
            raw = self._store.get(self._key)
        except Exception as e:
            logger.warning("PersistenceFailed: could not read review history: %s", e)
            return []
        return self._parse(raw)

    def record(self, item: HistoryItem) -> None:
        """Put ``item`` at the front, dropping any older entry with the same id.

        When the stored history cannot be read, nothing is written so the
        existing entries are not overwritten.
        """
        try:
            raw = self._store.get(self._key)
        except Exception as e:
            logger.warning("PersistenceFailed: could not read review history, not saving: %s", e)
            return
        history = [item, *(h for h in self._parse(raw) if h.id != item.id)][: self._limit]
        try:
            self._store.set(self._key, json.dumps([h.to_dict() for h in history]))
        except Exception as e:
            logger.warning("PersistenceFailed: could not save review history (%s): %s", type(e).__name__, e)

    def clear(self) -> None:
        self._erase()

    def get(self, item_id: str) -> HistoryItem | None:
        """Find an item by full id, or by a unique id prefix."""
        if not item_id:
            return None
        items = self.load()
        for item in items:
            if item.id == item_id:
                return item
        matches = [item for item in items if item.id.startswith(item_id)]
        return matches[0] if len(matches) == 1 else None

    def _erase(self) -> None:
        try:
            self._store.delete(self._key)
        except Exception as e:
            logger.warning("PersistenceFailed: could not clear review history: %s", e)

    def _parse(self, raw: str | None) -> list[HistoryItem]:
        if raw is None:
            return []
        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError(f"expected a JSON array, got {type(data).__name__}")
            items = [HistoryItem.from_dict(d) for d in data]
        except Exception as e:
            logger.warning("PersistenceFailed: could not parse review history, discarding it: %s", e)
            self._erase()
            return []
        return sorted(items, key=lambda item: item.timestamp, reverse=True)
