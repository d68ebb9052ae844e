"""coserv-store loader - CBOR parsing, validation, and error reporting."""

from coserv_store.loader.cbor_parser import CBORParseError, parse_cbor
from coserv_store.loader.validator import (
    DecodeErrorDetail,
    decode_document,
    validate_document,
)

__all__ = [
    "CBORParseError",
    "DecodeErrorDetail",
    "decode_document",
    "parse_cbor",
    "validate_document",
]
