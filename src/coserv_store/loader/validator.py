"""Document decoding pipeline combining CBOR parsing with Pydantic validation.

Two-stage decoding: first parse the wire encoding into named fields, then
validate against the Coserv Pydantic model. Errors from both stages are
collected as DecodeErrorDetail entries and raised together in a DecodeError.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import ValidationError

from coserv_store.errors import DecodeError
from coserv_store.loader.cbor_parser import CBORParseError, parse_cbor
from coserv_store.models.coserv import Coserv

log = logging.getLogger(__name__)

InputFormat = Literal["cbor", "json"]


@dataclass
class DecodeErrorDetail:
    """A single decoding problem with its location in the document.

    Attributes:
        field: Dotted field path that caused the error, or '<cbor>'/'<json>'
            for problems with the encoding itself.
        message: Human-readable error description.
        type: Pydantic error type string (e.g. 'missing', 'extra_forbidden'),
            or 'cbor_syntax_error'/'json_syntax_error'.
        input_value: The invalid input value, if available.
    """

    field: str
    message: str
    type: str
    input_value: Any = field(default=None)


def _loc_to_field_path(loc: tuple[str | int, ...]) -> str:
    """Convert a Pydantic error loc tuple to a dotted field path."""
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path = f"{path}.{part}" if path else str(part)
    return path


def validate_document(
    raw_data: dict[str, Any],
) -> tuple[Coserv | None, list[DecodeErrorDetail]]:
    """Validate parsed document fields against the Coserv model.

    Args:
        raw_data: Named-field dict produced by a parser.

    Returns:
        Tuple of (Coserv, []) on success, or (None, errors) on failure.
    """
    try:
        return Coserv.model_validate(raw_data), []
    except ValidationError as e:
        errors = [
            DecodeErrorDetail(
                field=_loc_to_field_path(err.get("loc", ())),
                message=err.get("msg", "Validation error"),
                type=err.get("type", "unknown"),
                input_value=err.get("input"),
            )
            for err in e.errors()
        ]
        return None, errors


def _parse(data: bytes, fmt: InputFormat) -> dict[str, Any]:
    if fmt == "cbor":
        try:
            return parse_cbor(data)
        except CBORParseError as e:
            raise DecodeError(
                "Failed to parse CoSERV from CBOR bytes.",
                details=[
                    DecodeErrorDetail(
                        field=e.path if e.path != "<root>" else "<cbor>",
                        message=e.message,
                        type="cbor_syntax_error",
                    )
                ],
            ) from e
    if fmt == "json":
        try:
            raw = json.loads(data)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise DecodeError(
                "Failed to parse CoSERV from JSON.",
                details=[
                    DecodeErrorDetail(
                        field="<json>", message=str(e), type="json_syntax_error"
                    )
                ],
            ) from e
        if not isinstance(raw, dict):
            raise DecodeError(
                "Failed to parse CoSERV from JSON.",
                details=[
                    DecodeErrorDetail(
                        field="<json>",
                        message="document must be a JSON object",
                        type="json_syntax_error",
                    )
                ],
            )
        return raw
    raise ValueError(f"Unknown input format {fmt!r}. Available formats: cbor, json")


def decode_document(data: bytes, fmt: InputFormat = "cbor") -> Coserv:
    """Decode an encoded CoSERV document.

    Args:
        data: Encoded document.
        fmt: Input encoding, 'cbor' (wire format) or 'json' (named fields).

    Returns:
        The validated Coserv document.

    Raises:
        DecodeError: If parsing or validation fails; ``details`` lists
            every problem found.
    """
    raw = _parse(data, fmt)
    document, errors = validate_document(raw)
    if document is None:
        log.debug("CoSERV %s document failed validation: %d error(s)", fmt, len(errors))
        raise DecodeError(
            f"CoSERV document failed validation with {len(errors)} error(s).",
            details=errors,
        )
    return document
