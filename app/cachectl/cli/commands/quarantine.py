"""Quarantine command.

Lists content that was moved aside instead of being overwritten.
"""

import typer
from rich.table import Table

from cachectl.cli.types import get_settings
from cachectl.linking.quarantine import list_quarantine
from cachectl.utils.formatting import console, print_info

app = typer.Typer(
    name="quarantine",
    help="List quarantined directories.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def quarantine(ctx: typer.Context) -> None:
    """List quarantined directories, newest first.

    cachectl never deletes quarantined content; remove entries manually
    once they are no longer needed.
    """
    settings = get_settings(ctx)
    entries = list_quarantine(settings.quarantine_root)

    if not entries:
        print_info(f"Quarantine is empty ({settings.quarantine_root}).")
        return

    table = Table(title="Quarantine", header_style="bold_header", border_style="border")
    table.add_column("Name", style="bold")
    table.add_column("Moved", style="muted")
    table.add_column("Location", style="dim")

    for entry in entries:
        ts = entry.timestamp
        moved = f"{ts[0:4]}-{ts[4:6]}-{ts[6:8]} {ts[9:11]}:{ts[11:13]}"
        table.add_row(entry.original_path.name, moved, str(entry.quarantine_path))

    console.print(table)
