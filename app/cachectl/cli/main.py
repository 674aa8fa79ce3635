"""The ``cachectl`` command: global options and sub-command registration."""

from pathlib import Path
from typing import Annotated

import typer

from cachectl import __version__
from cachectl.cli.commands import bucket, config, history, link, quarantine, sweep, watch, wrappers
from cachectl.utils.formatting import configure_logging

app = typer.Typer(
    name="cachectl",
    help="Centralize per-project cache directories.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"cachectl version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Config file (default: ~/.config/cachectl/config.toml).",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Log every match and link outcome.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Only log errors.",
        ),
    ] = False,
) -> None:
    """cachectl - centralize per-project cache directories.

    Replaces tool caches such as .ruff_cache or node_modules/.cache with
    redirects into one central location per project.
    """
    if verbose and quiet:
        raise typer.BadParameter("--verbose and --quiet are mutually exclusive")
    configure_logging(verbose=verbose, quiet=quiet)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


app.add_typer(sweep.app, name="sweep")
app.add_typer(watch.app, name="watch")
app.command(name="link")(link.link)
app.command(name="bucket")(bucket.bucket)
app.add_typer(wrappers.app, name="wrappers")
app.add_typer(quarantine.app, name="quarantine")
app.add_typer(history.app, name="history")
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
