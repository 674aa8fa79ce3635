"""Enforcement pipeline models.

Results produced by the sweep and watch modes of the enforcement engine.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from cachectl.models.link import LinkOutcome, LinkResult
from cachectl.models.pattern import CachePattern


class WatchState(str, Enum):
    """States of the watch loop for a single event.

    Attributes:
        IDLE: Waiting for the next event.
        SCANNING: Classifying the affected directory.
        RESOLVING: Resolving the owning project and its bucket.
        LINKING: Replacing the directory with a redirect.
    """

    IDLE = "idle"
    SCANNING = "scanning"
    RESOLVING = "resolving"
    LINKING = "linking"


@dataclass(frozen=True, slots=True)
class EnforcementResult:
    """Pipeline result for one matched directory.

    Attributes:
        path: The matched directory.
        root: Watch root being processed when the path was found.
        pattern: Pattern the directory matched.
        project_root: Resolved project root (VCS root or the watch root).
        bucket: Bucket key derived from the project root.
        link: Result of the link operation.
    """

    path: Path
    root: Path
    pattern: CachePattern
    project_root: Path
    bucket: str
    link: LinkResult

    @property
    def outcome(self) -> LinkOutcome:
        """Shortcut to the link outcome."""
        return self.link.outcome


@dataclass(slots=True)
class SweepReport:
    """Aggregated results of a sweep.

    Attributes:
        results: One entry per matched directory.
        enumeration_errors: Paths that could not be listed, with reasons.
        scanned: Number of directories visited.
    """

    results: list[EnforcementResult] = field(default_factory=list)
    enumeration_errors: list[tuple[str, str]] = field(default_factory=list)
    scanned: int = 0

    def count(self, outcome: LinkOutcome) -> int:
        """Number of results with the given outcome."""
        return sum(1 for r in self.results if r.outcome == outcome)

    @property
    def failed(self) -> int:
        """Number of paths that failed."""
        return self.count(LinkOutcome.FAILED)

    @property
    def has_failures(self) -> bool:
        """Whether any path failed."""
        return self.failed > 0
