"""Command name collision resolution.

Several tool directories (uv, npm, pipx, ...) may provide an executable
with the same name. When building a single wrapper directory only one of
them can win: the source with the lowest priority value. Traversal order
is the only tie-break.
"""

import logging
import os
import sys
from collections.abc import Iterable, Iterator
from pathlib import Path

from cachectl.models.collision import CollisionRecord, CommandSource, Resolution

logger = logging.getLogger(__name__)

_DEFAULT_PATHEXT = ".COM;.EXE;.BAT;.CMD;.PS1"


def _windows_suffixes() -> set[str]:
    return {s.lower() for s in os.environ.get("PATHEXT", _DEFAULT_PATHEXT).split(";") if s}


def command_name(path: Path) -> str | None:
    """Logical command name for an executable, or None if not executable.

    On Windows the name is the stem of a file with a PATHEXT suffix; on
    other platforms it is the file name of an executable regular file.
    """
    if sys.platform == "win32":
        if path.suffix.lower() in _windows_suffixes() and path.is_file():
            return path.stem
        return None
    if path.is_file() and os.access(path, os.X_OK):
        return path.name
    return None


def iter_candidates(directory: Path) -> Iterator[tuple[str, Path]]:
    """Yield (name, path) for every executable in ``directory``, sorted by name.

    Missing or unreadable directories yield nothing and log a warning.
    """
    try:
        entries = sorted(directory.iterdir())
    except OSError as e:
        logger.warning("Cannot list command source %s: %s", directory, e)
        return

    for entry in entries:
        try:
            name = command_name(entry)
        except OSError:
            logger.warning("Cannot inspect %s", entry)
            continue
        if name:
            yield name, entry


def resolve_commands(
    sources: Iterable[CommandSource],
    deny: Iterable[str] = (),
) -> Resolution:
    """Pick one executable per command name.

    Sources are traversed in ascending priority (stable for equal
    priorities). The first source providing a name claims it; later
    sources providing the same name are recorded as collisions.

    Args:
        sources: Candidate source directories.
        deny: Names that are never wrapped.

    Returns:
        Resolution with winners and collision records.
    """
    denied = set(deny)
    ordered = sorted(sources, key=lambda s: s.priority)
    winners: dict[str, tuple[str, Path]] = {}
    skipped: dict[str, list[tuple[str, Path]]] = {}

    for source in ordered:
        for name, path in iter_candidates(source.directory):
            if name in denied:
                logger.debug("Skipping denied command %s from %s", name, source.tag)
                continue
            if name not in winners:
                winners[name] = (source.tag, path)
                continue
            skipped.setdefault(name, []).append((source.tag, path))

    collisions: list[CollisionRecord] = []
    for name, losers in skipped.items():
        kept_tag, kept_path = winners[name]
        record = CollisionRecord(
            name=name,
            kept_tag=kept_tag,
            kept_path=kept_path,
            skipped=tuple(losers),
        )
        logger.warning(
            "Collision for '%s': kept %s (%s), skipped %s",
            name,
            kept_tag,
            kept_path,
            ", ".join(tag for tag, _ in losers),
        )
        collisions.append(record)

    return Resolution(winners=winners, collisions=collisions)
