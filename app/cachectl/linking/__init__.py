"""Directory linking and quarantine.

This module provides redirect creation with a symlink/junction/copy
fallback chain and the quarantine store that preserves replaced content.
"""

from cachectl.linking.manager import DirectoryLinkManager
from cachectl.linking.quarantine import QuarantineFailedError, list_quarantine, quarantine
from cachectl.linking.strategies import (
    DEFAULT_STRATEGIES,
    CopyStrategy,
    JunctionStrategy,
    LinkStrategy,
    StrategyAttempt,
    SymlinkStrategy,
    is_redirect,
    redirect_target,
)

__all__ = [
    "DEFAULT_STRATEGIES",
    "CopyStrategy",
    "DirectoryLinkManager",
    "JunctionStrategy",
    "LinkStrategy",
    "QuarantineFailedError",
    "StrategyAttempt",
    "SymlinkStrategy",
    "is_redirect",
    "list_quarantine",
    "quarantine",
    "redirect_target",
]
