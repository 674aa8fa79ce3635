"""``cachectl history``: directories that were redirected, copied or failed."""

import json
import os
from datetime import datetime
from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from cachectl.core.state import StateManager
from cachectl.models.history import HistoryActionType, HistoryEntry
from cachectl.utils.formatting import console, print_info

app = typer.Typer(
    name="history",
    help="View history of link changes.",
    invoke_without_command=True,
)

_ACTION_STYLES: dict[HistoryActionType, str] = {
    HistoryActionType.LINK: "linked",
    HistoryActionType.COPY: "copied",
    HistoryActionType.FAIL: "failed",
}


@app.callback(invoke_without_command=True)
def history(
    ctx: typer.Context,
    limit: Annotated[
        int,
        typer.Option("--limit", "-n", help="Maximum number of entries to show."),
    ] = 20,
    path: Annotated[
        Path | None,
        typer.Option("--path", "-p", help="Only entries for this project-side directory."),
    ] = None,
    action: Annotated[
        HistoryActionType | None,
        typer.Option("--action", "-a", help="Only entries of this action type."),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON."),
    ] = False,
) -> None:
    """Show recorded link changes, newest first.

    Examples:
        cachectl history                      # last 20 entries
        cachectl history -a fail              # only failures
        cachectl history -p ~/src/app/.tox    # one directory's past
        cachectl history --json               # for scripting
    """
    if ctx.invoked_subcommand is not None:
        return

    entries = _select(StateManager(), limit=limit, path=path, action=action)

    if not entries:
        print_info("No history entries found.")
        return

    if json_output:
        console.print_json(json.dumps([entry.to_dict() for entry in entries]))
    else:
        _print_table(entries)


def _select(
    manager: StateManager,
    *,
    limit: int,
    path: Path | None,
    action: HistoryActionType | None,
) -> list[HistoryEntry]:
    """Apply the filters, then the limit, so ``-n`` counts matching entries."""
    if path is None and action is None:
        return manager.get_history(limit=limit)

    if path is not None:
        entries = manager.find_by_path(os.path.normpath(os.path.abspath(path.expanduser())))
    else:
        entries = manager.get_history()
    if action is not None:
        entries = [e for e in entries if e.action_type == action]
    return entries[:limit]


def _print_table(entries: list[HistoryEntry]) -> None:
    table = Table(title="Link History", header_style="bold_header", border_style="border")
    table.add_column("ID", style="dim")
    table.add_column("Timestamp", style="info")
    table.add_column("Action")
    table.add_column("Path", style="bold")
    table.add_column("Quarantine / Error", style="muted")

    for entry in entries:
        style = _ACTION_STYLES[entry.action_type]
        table.add_row(
            entry.id[:8],
            _format_timestamp(entry.timestamp),
            f"[{style}]{entry.action_type.value}[/]",
            entry.path,
            entry.error or entry.quarantine_path or "-",
        )

    console.print(table)


def _format_timestamp(iso_timestamp: str) -> str:
    """Render a recorded ISO 8601 timestamp as ``YYYY-MM-DD HH:MM`` (UTC)."""
    return datetime.fromisoformat(iso_timestamp).strftime("%Y-%m-%d %H:%M")
