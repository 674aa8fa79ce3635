"""Config commands.

Create, inspect and locate the cachectl configuration file.
"""

from pathlib import Path
from typing import Annotated

import tomli_w
import typer
from rich.syntax import Syntax

from cachectl.cli.types import get_settings
from cachectl.core.config import ConfigError, Settings, save_settings, settings_to_dict
from cachectl.core.paths import get_config_path
from cachectl.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Manage the cachectl configuration.",
    no_args_is_help=True,
)


def _config_path(ctx: typer.Context) -> Path:
    obj = ctx.find_root().obj or {}
    return obj.get("config_path") or get_config_path()


@app.command()
def init(
    ctx: typer.Context,
    roots: Annotated[
        list[Path] | None,
        typer.Option("--root", "-r", help="Watch root to add (repeatable)."),
    ] = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing config file."),
    ] = False,
) -> None:
    """Write a config file with default settings."""
    path = _config_path(ctx)
    if path.exists() and not force:
        print_error(f"Config already exists: {path} (use --force to overwrite)")
        raise typer.Exit(code=1)

    settings = Settings(watch_roots=[r.expanduser().absolute() for r in roots or []])
    try:
        saved = save_settings(settings, path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    print_success(f"Config written to {saved}")
    if not settings.watch_roots:
        print_info("Add watch_roots to the config before running 'cachectl sweep'.")


@app.command()
def show(ctx: typer.Context) -> None:
    """Print the effective settings as TOML."""
    settings = get_settings(ctx)
    text = tomli_w.dumps(settings_to_dict(settings))
    console.print(Syntax(text, "toml", background_color="default"))


@app.command()
def path(ctx: typer.Context) -> None:
    """Print the config file location."""
    console.print(str(_config_path(ctx)))
