"""Quarantine store for content about to be replaced.

Directories that would otherwise be overwritten by a redirect are moved
into a quarantine folder under a collision-free name. Nothing is ever
deleted here; retention of quarantined content is up to the operator.
"""

import logging
import re
import secrets
import shutil
from datetime import datetime
from pathlib import Path

from cachectl.core.retry import RetryExhaustedError, retry
from cachectl.models.link import QuarantineEntry

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
MOVE_ATTEMPTS = 3
MOVE_DELAY = 0.5

_ENTRY_NAME = re.compile(r"^(?P<name>.+)_(?P<ts>\d{8}_\d{6})_(?P<suffix>[0-9a-f]{8})$")


class QuarantineFailedError(Exception):
    """Raised when existing content could not be moved into quarantine.

    Attributes:
        path: The path that could not be moved.
    """

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Could not quarantine {path}: {reason}")


def quarantine_name(basename: str, now: datetime | None = None) -> tuple[str, str, str]:
    """Build a unique quarantine folder name.

    Args:
        basename: Name of the directory being quarantined.
        now: Timestamp to embed (defaults to the current local time).

    Returns:
        Tuple of (folder name, timestamp, random suffix).
    """
    timestamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
    suffix = secrets.token_hex(4)
    return f"{basename}_{timestamp}_{suffix}", timestamp, suffix


def quarantine(path: Path, quarantine_root: Path) -> QuarantineEntry | None:
    """Move ``path`` into ``quarantine_root``.

    Args:
        path: Directory (or file) that is about to be replaced.
        quarantine_root: Base directory of the quarantine area.

    Returns:
        QuarantineEntry describing the move, or None when ``path`` does not
        exist (nothing to preserve).

    Raises:
        QuarantineFailedError: If the move failed after retries. The caller
            must not create anything at ``path`` in that case.
    """
    if not path.exists() and not path.is_symlink():
        logger.debug("Nothing to quarantine at %s", path)
        return None

    try:
        quarantine_root.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error("Cannot create quarantine root %s: %s", quarantine_root, e)
        raise QuarantineFailedError(path, str(e)) from e

    def move() -> tuple[Path, str, str]:
        # Fresh name per attempt: a failed cross-device move may leave a
        # partial copy behind at the previous destination.
        name, timestamp, suffix = quarantine_name(path.name)
        destination = quarantine_root / name
        shutil.move(str(path), str(destination))
        return destination, timestamp, suffix

    try:
        destination, timestamp, suffix = retry(
            MOVE_ATTEMPTS, MOVE_DELAY, move, retry_on=(OSError,)
        )
    except RetryExhaustedError as e:
        logger.error("Quarantine of %s failed: %s", path, e.last_error)
        raise QuarantineFailedError(path, str(e.last_error)) from e

    logger.warning("Quarantined %s -> %s", path, destination)
    return QuarantineEntry(
        original_path=path,
        quarantine_path=destination,
        timestamp=timestamp,
        suffix=suffix,
    )


def list_quarantine(quarantine_root: Path) -> list[QuarantineEntry]:
    """List quarantined entries, newest first.

    The original location is not stored on disk, so ``original_path`` is
    reconstructed as the bare folder name. Use the history file for the
    full original path.

    Args:
        quarantine_root: Base directory of the quarantine area.

    Returns:
        Parsed entries. Folders not created by cachectl are skipped.
    """
    if not quarantine_root.is_dir():
        return []

    entries: list[QuarantineEntry] = []
    for child in quarantine_root.iterdir():
        match = _ENTRY_NAME.match(child.name)
        if match is None:
            continue
        entries.append(
            QuarantineEntry(
                original_path=Path(match["name"]),
                quarantine_path=child,
                timestamp=match["ts"],
                suffix=match["suffix"],
            )
        )

    entries.sort(key=lambda e: (e.timestamp, e.quarantine_path.name), reverse=True)
    return entries
