"""Enforcement engine.

This module provides cache directory classification, project bucket
resolution, the one-shot sweep and the event-driven watcher.
"""

from cachectl.engine.classifier import is_allowed, matches
from cachectl.engine.enforcer import EnforcementEngine
from cachectl.engine.project import ProjectKeyResolver, bucket_key, find_vcs_root
from cachectl.engine.watcher import DirectoryEventHandler, Watcher, WatchEvent

__all__ = [
    "DirectoryEventHandler",
    "EnforcementEngine",
    "ProjectKeyResolver",
    "WatchEvent",
    "Watcher",
    "bucket_key",
    "find_vcs_root",
    "is_allowed",
    "matches",
]
