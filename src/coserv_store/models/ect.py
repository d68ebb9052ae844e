"""Evaluation condition/addition records (ECTs).

An ECT is the canonical unit of matchable state handed to the appraisal
engine. Records are built through ``Ect.build``, the single validating
factory, so an invalid record never exists.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, ValidationError, model_validator

from coserv_store.errors import RecordBuildError
from coserv_store.models.corim import CryptoKey, ElementMap, EnvironmentMap, Profile


class CmType(str, Enum):
    """Kind of conceptual message an ECT was derived from."""

    EVIDENCE = "evidence"
    REFERENCE_VALUES = "reference-values"
    ENDORSEMENTS = "endorsements"
    POLICY = "policy"
    VERIFIER = "verifier"


class Ect(BaseModel):
    """Environment, claims, authorities and profile of one record."""

    model_config = {"extra": "forbid", "frozen": True}

    kind: CmType
    environment: EnvironmentMap | None = None
    elements: list[ElementMap] = Field(default_factory=list)
    authorities: list[CryptoKey] = Field(default_factory=list)
    profile: Profile | None = None

    @model_validator(mode="after")
    def _check_matchable(self) -> Ect:
        if self.environment is None and not self.elements and not self.authorities:
            raise ValueError(
                "ECT must carry an environment, elements or authorities"
            )
        return self

    @classmethod
    def build(cls, **fields: Any) -> Ect:
        """Validate ``fields`` into an Ect.

        Raises:
            RecordBuildError: If the fields violate the record's rules.
        """
        try:
            return cls.model_validate(fields)
        except ValidationError as e:
            raise RecordBuildError(
                f"invalid ECT record: {e.error_count()} validation error(s)",
                errors=e.errors(include_url=False),
            ) from e
