"""Link command.

Points a single directory at a target directory using the same
quarantine and fallback rules as the sweep.
"""

from pathlib import Path
from typing import Annotated

import typer

from cachectl.cli.display import format_outcome, link_detail
from cachectl.cli.types import get_settings
from cachectl.core.state import StateManager
from cachectl.linking.manager import DirectoryLinkManager
from cachectl.utils.formatting import console


def link(
    ctx: typer.Context,
    link_path: Annotated[Path, typer.Argument(help="Directory to replace with a redirect.")],
    target_path: Annotated[Path, typer.Argument(help="Directory the redirect points at.")],
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show what would happen."),
    ] = False,
) -> None:
    """Replace LINK_PATH with a redirect to TARGET_PATH.

    Existing content at LINK_PATH is moved to the quarantine area first.
    """
    settings = get_settings(ctx)
    manager = DirectoryLinkManager(settings.quarantine_root, dry_run=dry_run)
    result = manager.ensure_link(
        link_path.expanduser().absolute(), target_path.expanduser().absolute()
    )

    if not dry_run:
        StateManager().record_link(result, command="cachectl link")

    detail = link_detail(result)
    console.print(
        f"{format_outcome(result)} {result.link_path} -> {result.target_path}"
        + (f" [dim]({detail})[/dim]" if detail else "")
    )

    if not result.success:
        raise typer.Exit(code=1)
