"""coserv-store inspect -- ingest CoSERV documents and show their relations.

Decodes and translates every given document into one in-memory store,
then prints a summary table, or the full relation bundle as JSON.
Stops at the first document that fails.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from coserv_store.cli.output import render_relations, render_summary
from coserv_store.errors import CoservStoreError, DecodeError
from coserv_store.loader.errors import ErrorFormatter
from coserv_store.models.config import StoreConfig, load_store_config
from coserv_store.models.relations import RelationBundle
from coserv_store.storage.mem_store import MemCoservStore

console = Console(stderr=True)
log = logging.getLogger(__name__)

INPUT_FORMATS = ("cbor", "json")


def resolve_format(input_format: str | None, config: StoreConfig) -> str:
    """Pick the input format from the CLI option or coserv.yaml."""
    fmt = input_format or config.input_format
    if fmt not in INPUT_FORMATS:
        console.print(
            f"[bold red]Error:[/bold red] unknown format {fmt!r} "
            f"(expected one of {', '.join(INPUT_FORMATS)})"
        )
        raise typer.Exit(code=1)
    return fmt


def inspect(
    files: list[str] = typer.Argument(..., help="CoSERV documents to ingest"),
    input_format: Optional[str] = typer.Option(
        None, "--format", "-f", help="Input encoding: cbor or json (default from coserv.yaml)"
    ),
    format_json: bool = typer.Option(False, "--json", help="Output the relation bundle as JSON"),
    verbose: bool = typer.Option(False, "-V", "--verbose", help="List every relation"),
) -> None:
    """Ingest CoSERV documents and summarize the relations they produce."""
    config = load_store_config()
    fmt = resolve_format(input_format, config)
    store = MemCoservStore()
    contributions: list[tuple[str, RelationBundle]] = []

    for name in files:
        path = Path(name)
        if not path.exists():
            console.print(f"[bold red]Error:[/bold red] File not found: {name}")
            raise typer.Exit(code=1)

        try:
            contributed = store.ingest(path.read_bytes(), fmt)
        except DecodeError as exc:
            console.print(f"[bold red]Decode error:[/bold red] {name}: {exc.message}")
            if exc.details:
                formatter = ErrorFormatter(ci_mode=config.ci_mode)
                typer.echo(formatter.format_all(exc.details, name), err=True)
            raise typer.Exit(code=1)
        except CoservStoreError as exc:
            console.print(f"[bold red]Translation error:[/bold red] {name}: {exc.message}")
            raise typer.Exit(code=1)

        log.info("Ingested %s: %d relation(s)", name, len(contributed))
        contributions.append((name, contributed))

    if format_json:
        typer.echo(store.items.to_json())
        return

    output_console = Console()
    render_summary(contributions, store, output_console)
    if verbose:
        render_relations(store, output_console)
