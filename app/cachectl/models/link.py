"""Link domain models.

Data structures produced while replacing a directory with a redirect:
the tri-state link outcome, quarantine records and lock handles.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class LinkOutcome(str, Enum):
    """Outcome of an ensure-link operation.

    Attributes:
        LINKED: The path is a redirect (symlink or junction) to the target.
        COPIED: Redirects were unavailable; target content was copied in.
            Later writes under the path are not reflected in the target.
        FAILED: No mechanism could be applied, or quarantine failed.
    """

    LINKED = "linked"
    COPIED = "copied"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class QuarantineEntry:
    """Record of a directory moved aside instead of being overwritten.

    Attributes:
        original_path: Where the content lived before.
        quarantine_path: Where the content lives now.
        timestamp: Local time of the move as ``YYYYmmdd_HHMMSS``.
        suffix: Random 8-character hex suffix making the name unique.
    """

    original_path: Path
    quarantine_path: Path
    timestamp: str
    suffix: str


@dataclass(frozen=True, slots=True)
class LockHandle:
    """An acquired cross-process lock.

    Attributes:
        resource: Logical resource name.
        marker_path: Marker file whose existence represents the lock.
        acquired_at: ISO 8601 acquisition time.
    """

    resource: str
    marker_path: Path
    acquired_at: str


@dataclass(frozen=True, slots=True)
class LinkResult:
    """Result of a single ensure-link operation.

    Attributes:
        link_path: Path that should redirect to the target.
        target_path: Centralized directory.
        outcome: Tri-state outcome.
        changed: False when the redirect was already in place.
        strategy: Name of the strategy that succeeded, if any.
        quarantine: Quarantine record if existing content was moved aside.
        error: Failure reason when outcome is FAILED.
        dry_run: Whether this was a dry-run (nothing touched).
    """

    link_path: Path
    target_path: Path
    outcome: LinkOutcome
    changed: bool = True
    strategy: str | None = None
    quarantine: QuarantineEntry | None = None
    error: str | None = None
    dry_run: bool = False

    def __post_init__(self) -> None:
        """Validate result consistency."""
        if self.outcome == LinkOutcome.FAILED and not self.error:
            msg = "A failed link result requires an error message"
            raise ValueError(msg)

    @property
    def success(self) -> bool:
        """Whether the path ended up usable (linked or copied)."""
        return self.outcome != LinkOutcome.FAILED
