"""Domain models for cachectl.

This module exports the data structures shared by the link manager,
the enforcement engine and the wrapper builder.
"""

from cachectl.models.collision import CollisionRecord, CommandSource, Resolution
from cachectl.models.enforcement import EnforcementResult, SweepReport, WatchState
from cachectl.models.history import HistoryActionType, HistoryEntry, create_history_entry
from cachectl.models.link import LinkOutcome, LinkResult, LockHandle, QuarantineEntry
from cachectl.models.pattern import CachePattern

__all__ = [
    "CachePattern",
    "CollisionRecord",
    "CommandSource",
    "EnforcementResult",
    "HistoryActionType",
    "HistoryEntry",
    "LinkOutcome",
    "LinkResult",
    "LockHandle",
    "QuarantineEntry",
    "Resolution",
    "SweepReport",
    "WatchState",
    "create_history_entry",
]
