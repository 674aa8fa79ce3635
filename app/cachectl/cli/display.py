"""Shared Rich rendering for CLI commands."""

from collections.abc import Sequence

from rich.table import Table

from cachectl.models.enforcement import EnforcementResult
from cachectl.models.link import LinkOutcome, LinkResult
from cachectl.utils.formatting import console, print_info, print_success, print_warning


def format_outcome(link: LinkResult) -> str:
    """Status cell markup for a link result."""
    if link.dry_run:
        return "[pending]would link[/]" if link.changed else "[muted]unchanged[/]"
    if link.outcome == LinkOutcome.FAILED:
        return "[failed]failed[/]"
    if link.outcome == LinkOutcome.COPIED:
        return "[copied]copied[/]"
    if not link.changed:
        return "[muted]unchanged[/]"
    return "[linked]linked[/]"


def link_detail(link: LinkResult) -> str:
    """Details cell for a link result."""
    if link.error:
        return link.error
    if link.quarantine is not None:
        return f"quarantined to {link.quarantine.quarantine_path}"
    return link.strategy or ""


def print_sweep_results(results: Sequence[EnforcementResult], *, dry_run: bool = False) -> None:
    """Display enforcement results and a one-line summary."""
    title = "Cache Directories (dry-run)" if dry_run else "Cache Directories"
    table = Table(title=title, header_style="bold_header", border_style="border")
    table.add_column("Path", style="bold")
    table.add_column("Bucket", style="muted", width=16)
    table.add_column("Status", width=10)
    table.add_column("Details", style="dim")

    for r in results:
        table.add_row(str(r.path), r.bucket or "-", format_outcome(r.link), link_detail(r.link))

    console.print(table)

    if dry_run:
        pending = sum(1 for r in results if r.link.changed)
        print_info(f"Dry-run: {pending} path(s) would be linked.")
        return

    changed = sum(1 for r in results if r.link.changed and r.link.success)
    copied = sum(1 for r in results if r.outcome == LinkOutcome.COPIED)
    failed = sum(1 for r in results if r.outcome == LinkOutcome.FAILED)

    if failed:
        print_warning(f"{changed} changed, {failed} failed")
    elif copied:
        print_warning(f"{changed} changed ({copied} degraded to copies)")
    else:
        print_success(f"All {len(results)} path(s) centralized ({changed} changed).")
