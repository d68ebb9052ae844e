"""coserv-store CLI entry point."""

import logging

import typer

from coserv_store import __version__
from coserv_store.cli.inspect_cmd import inspect
from coserv_store.cli.validate_cmd import validate
from coserv_store.models.config import load_store_config

app = typer.Typer(
    name="coserv-store",
    help="Translate CoSERV result documents into evaluation relations",
    no_args_is_help=True,
)

# Register subcommands
app.command()(inspect)
app.command()(validate)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"coserv-store {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging."),
) -> None:
    """Translate CoSERV result documents into evaluation relations."""
    level = "DEBUG" if debug else load_store_config().log_level
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
