"""SQLiteStore: the default local store.

A single two-column table maps keys to string values. SQLite ships with
Python, survives crashes mid-write, and keeps the history in one file the
user can delete at any time.

Schema:
  kv: one row per key; the history cache uses exactly one row.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from codelens_store.base import BaseStore

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS kv (
    key    TEXT PRIMARY KEY,
    value  TEXT NOT NULL
);
"""


class SQLiteStore(BaseStore):
    """Stores values in a local SQLite database file.

    The database file path defaults to `.codelens.db` in the current working
    directory. Configure via .codelens.yml: `store_path: /path/to/codelens.db`.
    """

    def __init__(self, db_path: str = ".codelens.db"):
        if db_path != ":memory:":
            Path(db_path).expanduser().parent.mkdir(parents=True, exist_ok=True)
            db_path = str(Path(db_path).expanduser())
        self._conn = sqlite3.connect(db_path)
        self._conn.executescript(_SCHEMA)
        self._conn.commit()

    def get(self, key: str) -> str | None:
        row = self._conn.execute("SELECT value FROM kv WHERE key=?", (key,)).fetchone()
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        self._conn.execute(
            "INSERT INTO kv (key, value) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET value=excluded.value",
            (key, value),
        )
        self._conn.commit()

    def delete(self, key: str) -> None:
        self._conn.execute("DELETE FROM kv WHERE key=?", (key,))
        self._conn.commit()

    def close(self) -> None:
        self._conn.close()
