"""Sweep command.

Walks every watch root once and replaces each matching cache directory
with a redirect into its project's central bucket.
"""

import json
from pathlib import Path
from typing import Annotated

import typer

from cachectl.cli.display import print_sweep_results
from cachectl.cli.types import get_settings, resolve_roots
from cachectl.core.state import StateManager
from cachectl.engine.enforcer import EnforcementEngine
from cachectl.models.enforcement import SweepReport
from cachectl.utils.formatting import console, print_info, print_success, print_warning

app = typer.Typer(
    name="sweep",
    help="Centralize existing cache directories once.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def sweep(
    ctx: typer.Context,
    roots: Annotated[
        list[Path] | None,
        typer.Option("--root", "-r", help="Root to sweep (repeatable). Overrides config."),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show what would be linked without changing anything."),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output results as JSON."),
    ] = False,
) -> None:
    """Sweep watch roots and link every matching cache directory.

    Exits with code 1 if any directory failed.

    Examples:
        cachectl sweep
        cachectl sweep --root ~/src --dry-run
    """
    settings = get_settings(ctx)
    selected = resolve_roots(settings, roots)

    engine = EnforcementEngine(
        settings,
        history=None if dry_run else StateManager(),
        dry_run=dry_run,
        command="cachectl sweep",
    )
    report = engine.sweep(selected)

    if json_output:
        _print_json(report)
    elif not report.results:
        print_success("No cache directories need centralizing.")
    else:
        print_sweep_results(report.results, dry_run=dry_run)

    if not json_output:
        for where, reason in report.enumeration_errors:
            print_warning(f"Skipped {where}: {reason}")
        console.print(f"\n[dim]Scanned {report.scanned} directories[/dim]")
        if dry_run:
            print_info("Dry-run: nothing was changed.")

    if report.has_failures:
        raise typer.Exit(code=1)


def _print_json(report: SweepReport) -> None:
    """Print sweep results as JSON."""
    data = {
        "scanned": report.scanned,
        "results": [
            {
                "path": str(r.path),
                "pattern": str(r.pattern),
                "project_root": str(r.project_root),
                "bucket": r.bucket,
                "target": str(r.link.target_path),
                "outcome": r.outcome.value,
                "changed": r.link.changed,
                "strategy": r.link.strategy,
                "quarantine": str(r.link.quarantine.quarantine_path) if r.link.quarantine else None,
                "error": r.link.error,
                "dry_run": r.link.dry_run,
            }
            for r in report.results
        ],
        "enumeration_errors": [
            {"path": where, "reason": reason} for where, reason in report.enumeration_errors
        ],
    }
    console.print_json(json.dumps(data))
