"""History entry model for tracking link changes.

This module defines data structures for recording directory replacements
in a history file, so the operator can trace where a cache went and
which quarantine folder holds its previous content.
"""

import json
import uuid
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from cachectl.models.link import LinkOutcome, LinkResult


class HistoryActionType(str, Enum):
    """Type of action recorded in history.

    Attributes:
        LINK: Directory replaced by a redirect.
        COPY: Directory replaced by a copy (degraded fallback).
        FAIL: Replacement attempted but failed.
    """

    LINK = "link"
    COPY = "copy"
    FAIL = "fail"


_OUTCOME_TO_ACTION: dict[LinkOutcome, HistoryActionType] = {
    LinkOutcome.LINKED: HistoryActionType.LINK,
    LinkOutcome.COPIED: HistoryActionType.COPY,
    LinkOutcome.FAILED: HistoryActionType.FAIL,
}

_OPTIONAL_FIELDS = ("quarantine_path", "error")


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    """Record of a single directory replacement.

    Attributes:
        id: Unique identifier (12-character hex string from UUID).
        timestamp: When the action occurred (ISO 8601 format with timezone).
        action_type: Type of action.
        path: The project-side path that was replaced.
        target: The centralized directory.
        quarantine_path: Where previous content was moved, if anywhere.
        error: Failure reason for FAIL entries.
        metadata: Additional context (command, strategy, bucket, ...).
    """

    id: str
    timestamp: str
    action_type: HistoryActionType
    path: str
    target: str
    quarantine_path: str | None = None
    error: str | None = None
    metadata: dict[str, Any] = field(default_factory=lambda: {})

    def __post_init__(self) -> None:
        for name in ("id", "timestamp", "path"):
            if not getattr(self, name):
                msg = f"History entry {name} cannot be empty"
                raise ValueError(msg)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready mapping; optional fields are omitted when unset."""
        data = asdict(self)
        data["action_type"] = self.action_type.value
        for key in _OPTIONAL_FIELDS:
            if data[key] is None:
                del data[key]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HistoryEntry":
        """Deserialize from dictionary.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If action_type is invalid.
        """
        return cls(
            id=data["id"],
            timestamp=data["timestamp"],
            action_type=HistoryActionType(data["action_type"]),
            path=data["path"],
            target=data["target"],
            quarantine_path=data.get("quarantine_path"),
            error=data.get("error"),
            metadata=data.get("metadata", {}),
        )

    def to_json_line(self) -> str:
        """Compact JSON without a trailing newline."""
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_json_line(cls, line: str) -> "HistoryEntry":
        """Parse one history line.

        Raises:
            json.JSONDecodeError, KeyError, ValueError: The line is corrupt.
        """
        return cls.from_dict(json.loads(line.strip()))


def create_history_entry(
    result: LinkResult,
    metadata: dict[str, Any] | None = None,
) -> HistoryEntry:
    """Build the entry recorded for ``result``, stamped with a fresh id and UTC time.

    The winning strategy is added to ``metadata`` unless the caller set one.
    """
    meta: dict[str, Any] = dict(metadata or {})
    if result.strategy:
        meta.setdefault("strategy", result.strategy)

    return HistoryEntry(
        id=uuid.uuid4().hex[:12],
        timestamp=datetime.now(UTC).isoformat(),
        action_type=_OUTCOME_TO_ACTION[result.outcome],
        path=str(result.link_path),
        target=str(result.target_path),
        quarantine_path=str(result.quarantine.quarantine_path) if result.quarantine else None,
        error=result.error,
        metadata=meta,
    )
