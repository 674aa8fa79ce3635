"""Bucket command.

Shows which project root and central bucket a cache directory resolves
to, using the same rules as ``sweep`` and ``watch``.
"""

import os
from pathlib import Path
from typing import Annotated

import typer

from cachectl.cli.types import get_settings
from cachectl.engine.project import ProjectKeyResolver
from cachectl.utils.formatting import console, print_warning


def bucket(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(help="Cache directory (or any directory) to resolve.")],
    fallback: Annotated[
        Path | None,
        typer.Option(
            "--root",
            "-r",
            help="Watch root to fall back to (defaults to the configured root containing PATH).",
        ),
    ] = None,
) -> None:
    """Resolve the project root and bucket key the engine would use for PATH.

    git is asked about the parent of PATH; outside a work tree the project
    root is the watch root containing PATH.
    """
    settings = get_settings(ctx)
    target = Path(os.path.normpath(path.expanduser().absolute()))

    if fallback is not None:
        root = Path(os.path.normpath(fallback.expanduser().absolute()))
    else:
        root = _containing_root(target, settings.watch_roots)
        if root is None:
            print_warning(f"{target} is not under a configured watch root; sweeps never visit it.")
            root = target.parent

    resolver = ProjectKeyResolver()
    project_root = resolver.resolve_project_root(target, root)
    key = resolver.bucket_key(project_root)

    console.print(f"[bold]Project root:[/bold] {project_root}")
    console.print(f"[bold]Bucket:[/bold]       {key}")
    console.print(f"[bold]Central dir:[/bold]  {settings.central_root / key}")


def _containing_root(path: Path, roots: list[Path]) -> Path | None:
    """Innermost watch root that contains ``path``."""
    containing = [r for r in roots if r == path or r in path.parents]
    return max(containing, key=lambda r: len(r.parts), default=None)
