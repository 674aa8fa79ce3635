"""Unified command wrapper directory.

Writes one small launcher script per resolved command into a single bin
directory. Rebuilding the directory is a read-modify-write over shared
state, so it runs under a cross-process lock.
"""

import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

from cachectl.core.lock import DEFAULT_LOCK_TIMEOUT, resource_lock
from cachectl.models.collision import Resolution

logger = logging.getLogger(__name__)

WRAPPER_MARKER = "generated by cachectl"


@dataclass(slots=True)
class WrapperBuildResult:
    """Outcome of a wrapper directory rebuild.

    Attributes:
        written: Wrapper files written.
        removed: Stale cachectl wrappers removed.
        dry_run: Whether this was a dry-run.
    """

    written: list[Path] = field(default_factory=list)
    removed: list[Path] = field(default_factory=list)
    dry_run: bool = False


def wrapper_filename(name: str) -> str:
    """File name of the wrapper for ``name`` on this platform."""
    return f"{name}.cmd" if sys.platform == "win32" else name


def render_wrapper(executable: Path) -> str:
    """Launcher script content forwarding all arguments to ``executable``."""
    if sys.platform == "win32":
        return f'@echo off\r\nrem {WRAPPER_MARKER}\r\n"{executable}" %*\r\n'
    quoted = str(executable).replace("'", "'\"'\"'")
    return f"#!/bin/sh\n# {WRAPPER_MARKER}\nexec '{quoted}' \"$@\"\n"


def is_generated(path: Path) -> bool:
    """Whether ``path`` is a wrapper written by cachectl."""
    if not path.is_file() or path.is_symlink():
        return False
    try:
        with path.open(encoding="utf-8", errors="replace") as f:
            head = f.read(256)
    except OSError:
        return False
    return WRAPPER_MARKER in head


def build_wrappers(
    bin_dir: Path,
    resolution: Resolution,
    *,
    lock_dir: Path | None = None,
    timeout: float = DEFAULT_LOCK_TIMEOUT,
    dry_run: bool = False,
) -> WrapperBuildResult:
    """Rebuild ``bin_dir`` so it holds exactly one wrapper per winner.

    Files in ``bin_dir`` that were not generated by cachectl are left
    alone, and a winner whose wrapper name is taken by such a file is
    skipped with a warning.

    Args:
        bin_dir: Wrapper directory.
        resolution: Resolved winners.
        lock_dir: Lock marker directory override.
        timeout: Lock timeout in seconds.
        dry_run: Report planned changes without writing.

    Returns:
        WrapperBuildResult.

    Raises:
        LockTimeoutError: If another process holds the wrapper lock too long.
        OSError: If the directory cannot be written.
    """
    result = WrapperBuildResult(dry_run=dry_run)
    wanted = {wrapper_filename(name): path for name, (_, path) in resolution.winners.items()}

    with resource_lock(f"wrappers:{bin_dir}", timeout=timeout, lock_dir=lock_dir):
        if not dry_run:
            bin_dir.mkdir(parents=True, exist_ok=True)

        existing = sorted(bin_dir.iterdir()) if bin_dir.is_dir() else []
        for entry in existing:
            if entry.name not in wanted and is_generated(entry):
                if not dry_run:
                    entry.unlink()
                result.removed.append(entry)
                logger.info("Removed stale wrapper %s", entry)

        for filename, executable in sorted(wanted.items()):
            wrapper = bin_dir / filename
            if wrapper.exists() and not is_generated(wrapper):
                logger.warning("Not overwriting foreign file %s", wrapper)
                continue
            if not dry_run:
                wrapper.write_text(render_wrapper(executable), encoding="utf-8")
                if sys.platform != "win32":
                    os.chmod(wrapper, 0o755)
            result.written.append(wrapper)
            logger.debug("Wrapper %s -> %s", wrapper, executable)

    return result
