"""Cross-process resource locking with marker files.

A lock is held by exclusively creating a marker file named after the
resource in a shared directory. Creation uses ``O_CREAT | O_EXCL`` so
that the existence check and the create happen as one atomic step.

The marker records the owner's PID. On POSIX a marker whose owner is no
longer running (a killed process) is treated as stale and broken by the
next waiter. Markers without a readable PID are never broken.

The lock is advisory: only processes that go through this module
respect it. Nested acquisition of the same resource by the same process
is not supported and blocks until the timeout expires.
"""

import logging
import os
import re
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import TypeVar

from cachectl.core.paths import ensure_lock_dir
from cachectl.models.link import LockHandle

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_LOCK_TIMEOUT = 30.0
DEFAULT_POLL_INTERVAL = 0.1

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class LockTimeoutError(Exception):
    """Raised when a resource stays locked beyond the allowed timeout.

    Attributes:
        resource: Name of the resource that could not be locked.
        timeout: Seconds waited before giving up.
        marker_path: Marker file that blocked acquisition.
        owner: PID recorded in the marker, if readable.
    """

    def __init__(
        self, resource: str, timeout: float, marker_path: Path, owner: int | None = None
    ) -> None:
        self.resource = resource
        self.timeout = timeout
        self.marker_path = marker_path
        self.owner = owner
        held_by = f"held by PID {owner}" if owner is not None else "owner unknown"
        super().__init__(
            f"Timed out after {timeout:.1f}s waiting for lock '{resource}' ({held_by}). "
            f"If no cachectl process is running, delete {marker_path}"
        )


def marker_name(resource: str) -> str:
    """Derive a filesystem-safe marker file name for a resource.

    Args:
        resource: Logical resource name (may contain path separators).

    Returns:
        File name with unsafe characters replaced by underscores.
    """
    return _UNSAFE_CHARS.sub("_", resource) + ".lock"


def _try_create_marker(marker_path: Path) -> bool:
    try:
        fd = os.open(marker_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
    except FileExistsError:
        return False
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(f"{os.getpid()} {datetime.now(UTC).isoformat()}\n")
    except OSError:
        marker_path.unlink(missing_ok=True)
        raise
    return True


def _read_owner(marker_path: Path) -> tuple[str, int | None]:
    """Marker text and the PID it names, if any."""
    try:
        text = marker_path.read_text(encoding="utf-8")
    except OSError:
        return "", None
    first = text.split(maxsplit=1)
    return text, int(first[0]) if first and first[0].isdigit() else None


def _pid_alive(pid: int) -> bool:
    if os.name != "posix":
        # os.kill(pid, 0) terminates the process on Windows.
        return True
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except OSError:
        return True
    return True


def _break_if_stale(marker_path: Path) -> bool:
    """Remove ``marker_path`` if its owner process is gone.

    The marker is renamed aside before it is deleted, and the renamed
    copy is compared with what was judged stale. If another process
    replaced the marker in between, its marker is put back.

    Returns:
        True if a stale marker was removed.
    """
    text, owner = _read_owner(marker_path)
    if owner is None or owner == os.getpid() or _pid_alive(owner):
        return False

    grave = marker_path.with_name(f"{marker_path.name}.{os.getpid()}.stale")
    try:
        os.replace(marker_path, grave)
    except FileNotFoundError:
        return False
    try:
        if grave.read_text(encoding="utf-8") != text:
            try:
                os.link(grave, marker_path)
            except OSError as e:
                logger.warning("Could not restore lock marker %s: %s", marker_path, e)
            return False
    finally:
        grave.unlink(missing_ok=True)

    logger.warning("Removed stale lock marker %s (PID %d is not running)", marker_path, owner)
    return True


@contextmanager
def resource_lock(
    resource: str,
    *,
    timeout: float = DEFAULT_LOCK_TIMEOUT,
    lock_dir: Path | None = None,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
) -> Iterator[LockHandle]:
    """Hold an exclusive cross-process lock for the duration of a block.

    Args:
        resource: Logical name of the shared resource.
        timeout: Maximum seconds to wait for the lock.
        lock_dir: Directory for marker files. Defaults to the shared
            temp location.
        poll_interval: Seconds to sleep between acquisition attempts.

    Yields:
        LockHandle describing the acquired lock.

    Raises:
        LockTimeoutError: If the lock could not be acquired in time.
    """
    directory = ensure_lock_dir(lock_dir)
    marker_path = directory / marker_name(resource)
    deadline = time.monotonic() + timeout

    while not _try_create_marker(marker_path):
        if _break_if_stale(marker_path):
            continue
        if time.monotonic() >= deadline:
            raise LockTimeoutError(resource, timeout, marker_path, _read_owner(marker_path)[1])
        time.sleep(poll_interval)

    handle = LockHandle(
        resource=resource,
        marker_path=marker_path,
        acquired_at=datetime.now(UTC).isoformat(),
    )
    logger.debug("Acquired lock '%s' (%s)", resource, marker_path)
    try:
        yield handle
    finally:
        try:
            marker_path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Could not remove lock marker %s: %s", marker_path, e)
        else:
            logger.debug("Released lock '%s'", resource)


def with_lock(
    resource: str,
    body: Callable[[], T],
    *,
    timeout: float = DEFAULT_LOCK_TIMEOUT,
    lock_dir: Path | None = None,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
) -> T:
    """Run ``body`` while holding the lock for ``resource``.

    Args:
        resource: Logical name of the shared resource.
        body: Zero-argument callable to run inside the lock.
        timeout: Maximum seconds to wait for the lock.
        lock_dir: Directory for marker files.
        poll_interval: Seconds to sleep between acquisition attempts.

    Returns:
        Whatever ``body`` returns.

    Raises:
        LockTimeoutError: If the lock could not be acquired in time.
    """
    with resource_lock(
        resource, timeout=timeout, lock_dir=lock_dir, poll_interval=poll_interval
    ):
        return body()
