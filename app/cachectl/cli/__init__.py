"""CLI package for cachectl.

This package contains the Typer application and all subcommands.
"""

from cachectl.cli.main import app

__all__ = ["app"]
