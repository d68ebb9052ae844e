"""Error formatter with dual-mode output (rich human and CI concise).

Produces Rust/Elm-style annotated error messages in human mode and
concise file:field -- message format in CI mode.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from coserv_store.loader.validator import DecodeErrorDetail


# Map Pydantic and parser error types to error codes
ERROR_CODES: dict[str, str] = {
    "extra_forbidden": "E001",
    "missing": "E002",
    "value_error": "E003",
    "too_short": "E003",
    "type_error": "E004",
    "string_type": "E004",
    "int_type": "E004",
    "bytes_type": "E004",
    "list_type": "E004",
    "dict_type": "E004",
    "model_type": "E004",
    "int_parsing": "E004",
    "datetime_parsing": "E004",
    "literal_error": "E005",
    "enum": "E005",
    "union_tag_invalid": "E005",
    "cbor_syntax_error": "E006",
    "json_syntax_error": "E006",
}

# Human-readable descriptions for error codes
ERROR_DESCRIPTIONS: dict[str, str] = {
    "E001": "unknown field",
    "E002": "required field missing",
    "E003": "invalid value",
    "E004": "type mismatch",
    "E005": "invalid choice",
    "E006": "encoding error",
}


class ErrorFormatter:
    """Formats decode errors for human or CI consumption.

    Args:
        ci_mode: If True, use CI-friendly concise output. If None,
            auto-detect from the CI environment variable.
    """

    def __init__(self, ci_mode: bool | None = None) -> None:
        if ci_mode is None:
            self.ci_mode = os.environ.get("CI", "").lower() in ("true", "1", "yes")
        else:
            self.ci_mode = ci_mode

    def _get_error_code(self, error_type: str) -> str:
        """Get the error code for a Pydantic or parser error type."""
        if error_type in ERROR_CODES:
            return ERROR_CODES[error_type]
        # Partial matches, e.g. 'bool_parsing' falls back to a type mismatch
        if error_type.endswith(("_type", "_parsing")):
            return "E004"
        return "E999"

    def _get_error_description(self, error_code: str) -> str:
        return ERROR_DESCRIPTIONS.get(error_code, "decode error")

    def format_error(self, error: DecodeErrorDetail, filename: str) -> str:
        """Format a single error for display.

        Args:
            error: The decode error detail.
            filename: Name of the document being decoded.

        Returns:
            Formatted error string.
        """
        if self.ci_mode:
            return f"{filename}:{error.field} -- {error.message}"

        error_code = self._get_error_code(error.type)
        description = self._get_error_description(error_code)
        lines = [
            f"error[{error_code}]: {description}",
            f"  --> {filename}",
            "   |",
            f"   | {error.field}: {error.message}",
            "   |",
        ]
        return "\n".join(lines)

    def format_all(self, errors: list[DecodeErrorDetail], filename: str) -> str:
        """Format all errors, joined with blank line separators."""
        return "\n\n".join(self.format_error(error, filename) for error in errors)

    def print_success(self, filename: str) -> None:
        """Print a success message for a valid document."""
        print(f"  {filename} ... valid")
