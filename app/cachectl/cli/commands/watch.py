"""Watch command.

Keeps running and centralizes cache directories as soon as they are
created or moved under a watch root.
"""

from pathlib import Path
from typing import Annotated

import typer

from cachectl.cli.types import get_settings, resolve_roots
from cachectl.core.state import StateManager
from cachectl.engine.enforcer import EnforcementEngine
from cachectl.engine.watcher import Watcher
from cachectl.utils.formatting import print_error, print_info, print_warning

app = typer.Typer(
    name="watch",
    help="Centralize cache directories as they appear.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def watch(
    ctx: typer.Context,
    roots: Annotated[
        list[Path] | None,
        typer.Option("--root", "-r", help="Root to watch (repeatable). Overrides config."),
    ] = None,
    sweep_first: Annotated[
        bool,
        typer.Option("--sweep/--no-sweep", help="Run a sweep before watching."),
    ] = True,
) -> None:
    """Watch roots for new cache directories until interrupted (Ctrl-C).

    Exits with code 1 if any directory failed, in the initial sweep or
    while watching.
    """
    settings = get_settings(ctx)
    selected = resolve_roots(settings, roots)

    engine = EnforcementEngine(settings, history=StateManager(), command="cachectl watch")

    failed = 0
    if sweep_first:
        report = engine.sweep(selected)
        failed += report.failed
        print_info(f"Initial sweep: {len(report.results)} matched, {report.failed} failed.")

    watcher = Watcher(engine, selected)
    print_info("Watching for new cache directories. Press Ctrl-C to stop.")
    try:
        watcher.run()
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    failed += watcher.failed
    if failed:
        print_warning(f"Stopped. {failed} path(s) failed; see `cachectl history -a fail`.")
        raise typer.Exit(code=1)
    print_info("Stopped.")
