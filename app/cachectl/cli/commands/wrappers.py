"""Wrappers command.

Builds the unified command wrapper directory from the configured tool
directories, reporting name collisions.
"""

from typing import Annotated

import typer
from rich.table import Table

from cachectl.cli.types import get_settings
from cachectl.core.lock import LockTimeoutError
from cachectl.models.collision import CollisionRecord
from cachectl.utils.formatting import console, print_error, print_info, print_success
from cachectl.wrappers.builder import build_wrappers
from cachectl.wrappers.collision import resolve_commands

app = typer.Typer(
    name="wrappers",
    help="Build the unified command wrapper directory.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def wrappers(
    ctx: typer.Context,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show what would be written."),
    ] = False,
) -> None:
    """Resolve commands across sources and (re)write wrappers."""
    settings = get_settings(ctx)
    config = settings.wrappers

    if not config.sources:
        print_info("No wrapper sources configured.")
        return

    resolution = resolve_commands([s.to_source() for s in config.sources], config.deny)
    if resolution.collisions:
        _print_collisions(resolution.collisions)

    try:
        result = build_wrappers(
            config.bin_dir,
            resolution,
            timeout=settings.lock_timeout_seconds,
            dry_run=dry_run,
        )
    except LockTimeoutError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    except OSError as e:
        print_error(f"Failed to write wrappers: {e}")
        raise typer.Exit(code=1) from e

    verb = "Would write" if dry_run else "Wrote"
    print_success(f"{verb} {len(result.written)} wrapper(s) to {config.bin_dir}")
    if result.removed:
        verb = "Would remove" if dry_run else "Removed"
        print_info(f"{verb} {len(result.removed)} stale wrapper(s).")


def _print_collisions(collisions: list[CollisionRecord]) -> None:
    """Display command name collisions."""
    table = Table(title="Command Collisions", header_style="bold_header", border_style="border")
    table.add_column("Command", style="bold")
    table.add_column("Kept", style="success")
    table.add_column("Skipped", style="muted")

    for record in collisions:
        skipped = ", ".join(f"{tag} ({path})" for tag, path in record.skipped)
        table.add_row(record.name, f"{record.kept_tag} ({record.kept_path})", skipped)

    console.print(table)
