"""Command wrapper resolution models."""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True, slots=True)
class CommandSource:
    """A directory of executables contributing command wrappers.

    Attributes:
        tag: Short label for the source (e.g., "uv", "npm").
        priority: Lower values win name collisions.
        directory: Directory containing the executables.
    """

    tag: str
    priority: int
    directory: Path

    def __post_init__(self) -> None:
        """Validate source data after initialization."""
        if not self.tag:
            msg = "Source tag cannot be empty"
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class CollisionRecord:
    """A command name provided by more than one source.

    Attributes:
        name: Logical command name.
        kept_tag: Tag of the winning source.
        kept_path: Executable the wrapper points at.
        skipped: (tag, path) pairs of the losing sources, in traversal order.
    """

    name: str
    kept_tag: str
    kept_path: Path
    skipped: tuple[tuple[str, Path], ...]


@dataclass(slots=True)
class Resolution:
    """Outcome of resolving command names across sources.

    Attributes:
        winners: Command name to (source tag, executable path).
        collisions: One record per name claimed by more than one source.
    """

    winners: dict[str, tuple[str, Path]] = field(default_factory=dict)
    collisions: list[CollisionRecord] = field(default_factory=list)
