"""Unified command wrappers.

This module resolves command name collisions across tool directories
and writes the resulting launcher scripts into one bin directory.
"""

from cachectl.wrappers.builder import WrapperBuildResult, build_wrappers, render_wrapper
from cachectl.wrappers.collision import command_name, iter_candidates, resolve_commands

__all__ = [
    "WrapperBuildResult",
    "build_wrappers",
    "command_name",
    "iter_candidates",
    "render_wrapper",
    "resolve_commands",
]
