"""Shared Rich consoles, message helpers and log routing.

Result tables and messages go to ``console`` (stdout) so ``--json`` output
stays parseable; warnings, errors and log records go to ``err_console``.
"""

import logging
import sys
from typing import TextIO

from rich.console import Console
from rich.logging import RichHandler

from cachectl.core.theme import get_theme


def _color_system(stream: TextIO) -> str | None:
    # Terminals get truecolor for the hex theme; otherwise Rich auto-detects.
    return "truecolor" if stream.isatty() else None


console = Console(theme=get_theme(), color_system=_color_system(sys.stdout))
err_console = Console(theme=get_theme(), stderr=True, color_system=_color_system(sys.stderr))


def configure_logging(*, verbose: bool = False, quiet: bool = False) -> None:
    """Route log records through Rich on stderr.

    Args:
        verbose: Show INFO records (link outcomes, matches).
        quiet: Show ERROR records only.
    """
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False, markup=False)],
        force=True,
    )


def print_info(message: str) -> None:
    console.print(f"[info]{message}[/]")


def print_warning(message: str) -> None:
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    console.print(f"[success]{message}[/]")
