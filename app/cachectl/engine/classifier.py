"""Cache directory classification.

Decides whether a directory is a cache folder that should be
centralized, and whether a path lies inside an allow-listed area.
"""

import logging
import os
from collections.abc import Iterable
from pathlib import Path, PurePath

from cachectl.models.pattern import CachePattern

logger = logging.getLogger(__name__)


def _parent_parts(full_path: PurePath) -> tuple[str, ...]:
    return full_path.parent.parts


def matches(
    full_path: Path,
    name: str,
    patterns: Iterable[CachePattern],
) -> CachePattern | None:
    """Return the first pattern that matches a directory.

    Plain patterns compare ``name`` for exact equality. Nested patterns
    additionally require the parent path of ``full_path`` to end with the
    pattern's parent segments.

    Args:
        full_path: Full path of the directory.
        name: Directory name (usually ``full_path.name``).
        patterns: Patterns in configured order.

    Returns:
        The matching pattern, or None.
    """
    for pattern in patterns:
        if name != pattern.name:
            continue
        if pattern.is_nested:
            parents = _parent_parts(full_path)
            depth = len(pattern.parents)
            if len(parents) < depth or parents[-depth:] != pattern.parents:
                continue
        logger.debug("Matched %s with pattern %s", full_path, pattern)
        return pattern
    return None


def _normalize(path: Path | str) -> str:
    return os.path.normcase(os.path.normpath(os.path.abspath(path))).lower()


def is_allowed(path: Path, allow_roots: Iterable[Path]) -> bool:
    """Check whether ``path`` lies inside one of the allow roots.

    Comparison is a case-insensitive prefix match on path boundaries, so
    ``/src/app`` does not cover ``/src/application``.

    Args:
        path: Path to check.
        allow_roots: Exempt path prefixes.

    Returns:
        True if ``path`` equals or is below an allow root.
    """
    candidate = _normalize(path)
    for root in allow_roots:
        prefix = _normalize(root)
        if candidate == prefix:
            return True
        if candidate.startswith(prefix.rstrip(os.sep) + os.sep):
            return True
    return False
