"""Redirect detection and link creation strategies.

A redirect is a symbolic link or a directory junction. Link creation is
attempted with an ordered list of strategies; each strategy reports a
tagged attempt and the dispatcher stops at the first success:

1. ``symlink``: native symbolic link (may need privileges on Windows).
2. ``junction``: directory junction via ``mklink /J`` (Windows only,
   same volume only).
3. ``copy``: recursive copy of the target into a real directory. Later
   writes under the link path are not reflected in the target.
"""

import errno
import logging
import os
import shutil
import subprocess
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from cachectl.core.retry import RetryExhaustedError, retry
from cachectl.models.link import LinkOutcome
from cachectl.utils.shell import run_command

logger = logging.getLogger(__name__)

_WINDOWS_PREFIXES = ("\\\\?\\", "\\??\\")


def is_redirect(path: Path) -> bool:
    """Check whether ``path`` is a symbolic link or a junction."""
    return path.is_symlink() or path.is_junction()


def redirect_target(path: Path) -> Path | None:
    """Return the normalized location a redirect points at.

    Relative link contents are resolved against the link's parent.

    Returns:
        Target path, or None if ``path`` is not a redirect.
    """
    if not is_redirect(path):
        return None
    raw = os.readlink(path)
    for prefix in _WINDOWS_PREFIXES:
        if raw.startswith(prefix):
            raw = raw[len(prefix) :]
    target = Path(raw)
    if not target.is_absolute():
        target = path.parent / target
    return Path(os.path.normpath(target))


def same_location(first: Path, second: Path) -> bool:
    """Compare two paths, tolerating case and symlinked ancestors."""
    if os.path.normcase(os.path.abspath(first)) == os.path.normcase(os.path.abspath(second)):
        return True
    try:
        return os.path.samefile(first, second)
    except OSError:
        return False


def points_at(link_path: Path, target_path: Path) -> bool:
    """Check whether ``link_path`` is a redirect to ``target_path``."""
    current = redirect_target(link_path)
    return current is not None and same_location(current, target_path)


def remove_redirect(path: Path) -> None:
    """Remove a redirect entry without touching what it points at.

    Raises:
        OSError: If the entry cannot be removed.
    """
    if path.is_junction():
        os.rmdir(path)
    else:
        path.unlink()


@dataclass(frozen=True, slots=True)
class StrategyAttempt:
    """Tagged result of one strategy.

    Attributes:
        strategy: Strategy name.
        outcome: LINKED or COPIED on success, FAILED otherwise.
        error: Failure reason.
    """

    strategy: str
    outcome: LinkOutcome
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        """Whether the strategy produced a usable path."""
        return self.outcome != LinkOutcome.FAILED


class LinkStrategy(ABC):
    """Base class for a single way of pointing a path at a directory."""

    name: str = ""
    outcome: LinkOutcome = LinkOutcome.LINKED

    def attempt(self, link_path: Path, target_path: Path) -> StrategyAttempt:
        """Run the strategy, converting OS errors into a failed attempt."""
        try:
            self.create(link_path, target_path)
        except OSError as e:
            logger.debug("Strategy %s failed for %s: %s", self.name, link_path, e)
            return StrategyAttempt(self.name, LinkOutcome.FAILED, str(e))
        return StrategyAttempt(self.name, self.outcome)

    @abstractmethod
    def create(self, link_path: Path, target_path: Path) -> None:
        """Create ``link_path`` for ``target_path``.

        Raises:
            OSError: If the strategy cannot be applied.
        """


class SymlinkStrategy(LinkStrategy):
    """Native symbolic link."""

    name = "symlink"

    def create(self, link_path: Path, target_path: Path) -> None:
        link_path.symlink_to(target_path, target_is_directory=True)


class JunctionStrategy(LinkStrategy):
    """Windows directory junction created through ``cmd /c mklink /J``."""

    name = "junction"
    attempts = 2
    delay = 0.5

    def is_available(self) -> bool:
        return sys.platform == "win32"

    def create(self, link_path: Path, target_path: Path) -> None:
        if not self.is_available():
            raise OSError(errno.ENOTSUP, "Directory junctions are only supported on Windows")

        def run() -> None:
            result = run_command(
                ["cmd", "/c", "mklink", "/J", str(link_path), str(target_path)],
                timeout=30.0,
            )
            if not result.success:
                raise OSError(result.message or "mklink failed")

        try:
            retry(self.attempts, self.delay, run, retry_on=(OSError, subprocess.TimeoutExpired))
        except RetryExhaustedError as e:
            raise OSError(str(e.last_error)) from e


class CopyStrategy(LinkStrategy):
    """Real directory holding a copy of the target's content."""

    name = "copy"
    outcome = LinkOutcome.COPIED

    def create(self, link_path: Path, target_path: Path) -> None:
        link_path.mkdir()
        try:
            shutil.copytree(target_path, link_path, symlinks=True, dirs_exist_ok=True)
        except OSError:
            # Only our own partial copy lives here; the original is in quarantine.
            shutil.rmtree(link_path, ignore_errors=True)
            raise


DEFAULT_STRATEGIES: tuple[LinkStrategy, ...] = (
    SymlinkStrategy(),
    JunctionStrategy(),
    CopyStrategy(),
)


def apply_strategies(
    link_path: Path,
    target_path: Path,
    strategies: tuple[LinkStrategy, ...] = DEFAULT_STRATEGIES,
) -> list[StrategyAttempt]:
    """Try strategies in order until one succeeds.

    Args:
        link_path: Path to create (must not exist).
        target_path: Existing centralized directory.
        strategies: Ordered strategies.

    Returns:
        Every attempt made; the last one is the successful one, if any.
    """
    attempts: list[StrategyAttempt] = []
    for strategy in strategies:
        attempt = strategy.attempt(link_path, target_path)
        attempts.append(attempt)
        if attempt.succeeded:
            break
    return attempts
