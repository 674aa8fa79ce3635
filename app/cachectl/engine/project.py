"""Project root and bucket resolution.

The project owning a cache directory is the enclosing git work tree if
one can be discovered, otherwise the watch root being processed. Each
project root maps to a deterministic bucket key.
"""

import hashlib
import logging
import os
import subprocess
import time
from collections import OrderedDict
from collections.abc import Callable
from pathlib import Path

from cachectl.utils.shell import run_command

logger = logging.getLogger(__name__)

BUCKET_KEY_LENGTH = 16
VCS_TIMEOUT = 10.0
VCS_CACHE_TTL = 60.0
VCS_CACHE_SIZE = 1024


def bucket_key(project_root: Path | str) -> str:
    """Derive the bucket name for a project root.

    The path is normalized and lowercased before hashing, so the same
    root always yields the same key across runs and spellings.

    Args:
        project_root: Project root directory.

    Returns:
        16 hex characters of the SHA-256 digest.
    """
    normalized = os.path.normpath(str(project_root)).lower()
    digest = hashlib.sha256(normalized.encode("utf-8")).hexdigest()
    return digest[:BUCKET_KEY_LENGTH]


def find_vcs_root(path: Path) -> Path | None:
    """Ask git for the work tree containing ``path``.

    Returns:
        The work tree root, or None when git is missing, fails, or times
        out, or ``path`` is not inside a repository.
    """
    try:
        result = run_command(
            ["git", "-C", str(path), "rev-parse", "--show-toplevel"],
            timeout=VCS_TIMEOUT,
        )
    except (FileNotFoundError, OSError, subprocess.TimeoutExpired) as e:
        logger.debug("git unavailable for %s: %s", path, e)
        return None

    if not result.success:
        return None

    top = result.stdout.strip()
    return Path(os.path.normpath(top)) if top else None


class ProjectKeyResolver:
    """Resolves project roots and bucket keys, caching git lookups.

    The cache is keyed by the directory git was asked about. Entries expire
    after ``cache_ttl`` seconds, so a repository created while ``watch``
    runs is picked up, and at most ``cache_size`` entries are kept (least
    recently used first out).
    """

    def __init__(
        self,
        *,
        use_vcs: bool = True,
        cache_ttl: float = VCS_CACHE_TTL,
        cache_size: int = VCS_CACHE_SIZE,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._use_vcs = use_vcs
        self._cache_ttl = cache_ttl
        self._cache_size = cache_size
        self._clock = clock
        self._cache: OrderedDict[Path, tuple[float, Path | None]] = OrderedDict()

    def resolve_project_root(self, path: Path, fallback_root: Path) -> Path:
        """Return the project root owning ``path``.

        git is asked about the parent of ``path``; lookups are cached per
        parent directory for ``cache_ttl`` seconds.

        Args:
            path: Matched cache directory.
            fallback_root: Watch root currently being processed.

        Returns:
            The git work tree root, or ``fallback_root``.
        """
        if not self._use_vcs:
            return fallback_root

        root = self._lookup(path.parent)
        return root if root is not None else fallback_root

    def _lookup(self, directory: Path) -> Path | None:
        now = self._clock()
        cached = self._cache.get(directory)
        if cached is not None and now - cached[0] < self._cache_ttl:
            self._cache.move_to_end(directory)
            return cached[1]

        root = find_vcs_root(directory)
        self._cache[directory] = (now, root)
        self._cache.move_to_end(directory)
        while len(self._cache) > self._cache_size:
            self._cache.popitem(last=False)
        return root

    def bucket_key(self, project_root: Path) -> str:
        """See :func:`bucket_key`."""
        return bucket_key(project_root)
