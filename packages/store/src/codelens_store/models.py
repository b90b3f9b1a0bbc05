"""Review history data model.

Decoupled from codelens_core so the store layer can be used on its own;
the CLI maps a core ReviewResult to a HistoryItem before recording it.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

REVIEW_KINDS = ("file", "repo")


@dataclass(frozen=True)
class HistoryItem:
    """One completed review. Never modified after creation."""

    id: str
    timestamp: int  # milliseconds since the Unix epoch
    file_name: str
    language: str  # language label
    feedback: str
    code: str
    mode: str
    kind: str = "file"  # "file" | "repo"

    @property
    def created_at(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp / 1000, tz=timezone.utc)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "fileName": self.file_name,
            "language": self.language,
            "feedback": self.feedback,
            "code": self.code,
            "mode": self.mode,
            "kind": self.kind,
        }

    @classmethod
    def from_dict(cls, d: dict) -> HistoryItem:
        """Build an item from its persisted form; raises ValueError if malformed."""
        if not isinstance(d, dict):
            raise ValueError(f"history entry must be an object, got {type(d).__name__}")
        try:
            item = cls(
                id=d["id"],
                timestamp=d["timestamp"],
                file_name=d["fileName"],
                language=d["language"],
                feedback=d["feedback"],
                code=d["code"],
                mode=d.get("mode") or "comprehensive",
                kind=d.get("kind") or "file",
            )
        except KeyError as e:
            raise ValueError(f"history entry is missing {e.args[0]!r}") from e
        if not isinstance(item.id, str) or not item.id:
            raise ValueError("history entry has no id")
        if isinstance(item.timestamp, bool) or not isinstance(item.timestamp, (int, float)):
            raise ValueError(f"history entry {item.id} has a non-numeric timestamp")
        for name in ("file_name", "language", "feedback", "code", "mode"):
            if not isinstance(getattr(item, name), str):
                raise ValueError(f"history entry {item.id} has a non-string {name}")
        if item.kind not in REVIEW_KINDS:
            raise ValueError(f"history entry {item.id} has unknown kind {item.kind!r}")
        return item


def new_history_item(
    file_name: str,
    language: str,
    feedback: str,
    code: str,
    mode: str,
    kind: str = "file",
    created_at: datetime | None = None,
) -> HistoryItem:
    """Create a HistoryItem with a fresh id and a millisecond timestamp."""
    when = created_at or datetime.now(timezone.utc)
    return HistoryItem(
        id=str(uuid.uuid4()),
        timestamp=int(when.timestamp() * 1000),
        file_name=file_name,
        language=language,
        feedback=feedback,
        code=code,
        mode=mode,
        kind=kind,
    )
