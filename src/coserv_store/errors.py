"""Exception hierarchy for coserv-store."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from coserv_store.loader.validator import DecodeErrorDetail


class CoservStoreError(Exception):
    """Base exception for all coserv-store errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint


class DecodeError(CoservStoreError):
    """Input bytes are not a valid CoSERV document.

    Carries every problem found during decoding so callers can report
    them all at once.
    """

    def __init__(
        self,
        message: str,
        *,
        details: list[DecodeErrorDetail] | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.details = details or []


class MissingResults(CoservStoreError):
    """The document has no results section at all."""


class EmptyResultSet(CoservStoreError):
    """The results section carries no populated result-set variant."""


class NoRelevantQuads(CoservStoreError):
    """The result set produced no relations.

    Raised both for a result-set variant this translator does not handle
    and for a handled variant whose quad list is empty. ``reason`` tells
    the two apart: ``"unsupported-variant"`` or ``"empty-quads"``.
    """

    UNSUPPORTED_VARIANT = "unsupported-variant"
    EMPTY_QUADS = "empty-quads"

    def __init__(
        self,
        message: str,
        *,
        reason: str,
        variant: str | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.reason = reason
        self.variant = variant


class RecordBuildError(CoservStoreError, ValueError):
    """A condition/addition record failed its construction rules."""

    def __init__(
        self,
        message: str,
        *,
        errors: list[dict[str, Any]] | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.errors = errors or []


class CapabilityMismatch(CoservStoreError):
    """An operation outside the store's specialization was requested."""

    def __init__(self, operation: str, specialization: str) -> None:
        super().__init__(
            f"{operation} not supported - {specialization}",
            hint="Use ingest() or merge() with CoSERV result documents.",
        )
        self.operation = operation
        self.specialization = specialization
