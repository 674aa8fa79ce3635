"""Subprocess helper for the few external tools cachectl calls (git, mklink)."""

import logging
import subprocess
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Captured output and exit code of an external command."""

    stdout: str
    stderr: str
    returncode: int

    @property
    def success(self) -> bool:
        return self.returncode == 0

    @property
    def message(self) -> str:
        """First non-empty stream, stripped; used for error reporting."""
        return self.stderr.strip() or self.stdout.strip()


def run_command(
    args: list[str],
    *,
    timeout: float | None = 60.0,
    cwd: str | None = None,
) -> CommandResult:
    """Run ``args`` and capture its text output.

    A non-zero exit is reported through ``CommandResult.returncode``, not
    raised. ``FileNotFoundError`` (missing executable) and
    ``subprocess.TimeoutExpired`` propagate to the caller.
    """
    logger.debug("Running %s (timeout=%s)", " ".join(args), timeout)
    completed = subprocess.run(
        args,
        capture_output=True,
        text=True,
        check=False,
        timeout=timeout,
        cwd=cwd,
    )
    if completed.returncode != 0:
        logger.debug("%s exited with %d", args[0], completed.returncode)
    return CommandResult(
        stdout=completed.stdout,
        stderr=completed.stderr,
        returncode=completed.returncode,
    )
