"""Shared helpers for CLI commands.

This module provides settings loading and common option handling used
across multiple CLI command modules to avoid code duplication.
"""

from pathlib import Path

import typer

from cachectl.core.config import ConfigError, Settings, load_settings_or_default
from cachectl.utils.formatting import print_error


def get_settings(ctx: typer.Context) -> Settings:
    """Load settings for the current invocation.

    Uses the ``--config`` path stored on the root context, falling back to
    defaults when no config file exists.

    Raises:
        typer.Exit: With code 1 if the config file is invalid.
    """
    obj = ctx.find_root().obj or {}
    config_path: Path | None = obj.get("config_path")
    try:
        return load_settings_or_default(config_path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


def resolve_roots(settings: Settings, roots: list[Path] | None) -> list[Path]:
    """Return CLI-provided roots (expanded) or the configured watch roots.

    Raises:
        typer.Exit: With code 1 if no roots are available.
    """
    selected = [r.expanduser().absolute() for r in roots] if roots else settings.watch_roots
    if not selected:
        print_error("No watch roots configured. Pass --root or run 'cachectl config init'.")
        raise typer.Exit(code=1)
    return selected
