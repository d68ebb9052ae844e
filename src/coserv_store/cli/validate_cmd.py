"""coserv-store validate CLI command for CoSERV document decoding.

Decodes documents without translating them, reporting all decode errors
at once with rich or CI-friendly formatting.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from coserv_store.cli.inspect_cmd import resolve_format
from coserv_store.errors import DecodeError
from coserv_store.loader.errors import ErrorFormatter
from coserv_store.loader.validator import decode_document
from coserv_store.models.config import load_store_config


def validate(
    files: list[str] = typer.Argument(..., help="CoSERV documents to validate"),
    input_format: Optional[str] = typer.Option(
        None, "--format", "-f", help="Input encoding: cbor or json (default from coserv.yaml)"
    ),
    ci: bool = typer.Option(False, "--ci", help="CI-friendly concise output"),
) -> None:
    """Validate CoSERV documents against the document schema.

    Exits with code 0 if all documents decode, 1 if any fail.
    """
    config = load_store_config()
    fmt = resolve_format(input_format, config)
    formatter = ErrorFormatter(ci_mode=ci or config.ci_mode)

    total = len(files)
    valid_count = 0

    for name in files:
        path = Path(name)
        if not path.exists():
            typer.echo(f"Error: File not found: {name}", err=True)
            raise typer.Exit(code=1)

        try:
            decode_document(path.read_bytes(), fmt)
        except DecodeError as exc:
            output = formatter.format_all(exc.details, name) or exc.message
            typer.echo(output, err=not formatter.ci_mode)
        else:
            valid_count += 1
            formatter.print_success(name)

    typer.echo(f"\n{valid_count}/{total} documents valid")

    if valid_count < total:
        raise typer.Exit(code=1)
