"""Utility modules for cachectl.

This module exports commonly used utility functions.
"""

from cachectl.utils.formatting import (
    configure_logging,
    console,
    err_console,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from cachectl.utils.shell import CommandResult, run_command

__all__ = [
    "CommandResult",
    "configure_logging",
    "console",
    "err_console",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
    "run_command",
]
