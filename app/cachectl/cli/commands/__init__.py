"""CLI commands for cachectl.

This package contains all subcommand implementations.
"""

from cachectl.cli.commands import bucket, config, history, link, quarantine, sweep, watch, wrappers

__all__ = ["bucket", "config", "history", "link", "quarantine", "sweep", "watch", "wrappers"]
