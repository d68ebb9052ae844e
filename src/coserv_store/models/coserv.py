"""Decoded CoSERV document model.

A CoSERV document answers a query for attestation artifacts. Its result
set holds exactly one variant: reference-value quads, trust-anchor (key)
quads or endorsed-value quads. Each quad pairs a triple with the
authorities that vouch for it.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field

from coserv_store.models.corim import (
    CryptoKey,
    ElementMap,
    EnvironmentMap,
    MeasurementKey,
    Profile,
)


class ArtifactType(str, Enum):
    ENDORSED_VALUES = "endorsed-values"
    TRUST_ANCHORS = "trust-anchors"
    REFERENCE_VALUES = "reference-values"


class ResultType(str, Enum):
    COLLECTED_ARTIFACTS = "collected-artifacts"
    SOURCE_ARTIFACTS = "source-artifacts"
    BOTH = "both"


class Query(BaseModel):
    """The query a CoSERV document answers. Selectors are kept as decoded."""

    model_config = {"extra": "forbid", "frozen": True}

    artifact_type: ArtifactType
    environment_selector: Any = None
    timestamp: datetime | None = None
    result_type: ResultType = ResultType.COLLECTED_ARTIFACTS


class ReferenceTriple(BaseModel):
    model_config = {"extra": "forbid", "frozen": True}

    ref_env: EnvironmentMap
    ref_claims: list[ElementMap] = Field(default_factory=list)


class KeyConditions(BaseModel):
    """Optional constraints on how trust-anchor keys may be used."""

    model_config = {"extra": "forbid", "frozen": True}

    mkey: MeasurementKey | None = None
    authorized_by: list[CryptoKey] | None = None


class KeyTriple(BaseModel):
    model_config = {"extra": "forbid", "frozen": True}

    environment: EnvironmentMap
    key_list: list[CryptoKey] = Field(default_factory=list)
    conditions: KeyConditions | None = None


class EndorsedTriple(BaseModel):
    model_config = {"extra": "forbid", "frozen": True}

    environment: EnvironmentMap
    claims: list[ElementMap] = Field(default_factory=list)


class RvQuad(BaseModel):
    """Reference values for an environment and who endorses them."""

    model_config = {"extra": "forbid", "frozen": True}

    authorities: list[CryptoKey] = Field(default_factory=list)
    triple: ReferenceTriple


class AkQuad(BaseModel):
    """Attestation keys for an environment and who endorses them."""

    model_config = {"extra": "forbid", "frozen": True}

    authorities: list[CryptoKey] = Field(default_factory=list)
    triple: KeyTriple


class EvQuad(BaseModel):
    model_config = {"extra": "forbid", "frozen": True}

    authorities: list[CryptoKey] = Field(default_factory=list)
    triple: EndorsedTriple


class ReferenceValuesResult(BaseModel):
    model_config = {"extra": "forbid", "frozen": True}

    type: Literal["reference-values"] = "reference-values"
    rv_quads: list[RvQuad] = Field(default_factory=list)


class TrustAnchorsResult(BaseModel):
    model_config = {"extra": "forbid", "frozen": True}

    type: Literal["trust-anchors"] = "trust-anchors"
    ak_quads: list[AkQuad] = Field(default_factory=list)


class EndorsedValuesResult(BaseModel):
    model_config = {"extra": "forbid", "frozen": True}

    type: Literal["endorsed-values"] = "endorsed-values"
    ev_quads: list[EvQuad] = Field(default_factory=list)


ResultSetChoice = Annotated[
    ReferenceValuesResult | TrustAnchorsResult | EndorsedValuesResult,
    Field(discriminator="type"),
]


class ResultSet(BaseModel):
    """Results section of a CoSERV document."""

    model_config = {"extra": "forbid", "frozen": True}

    result_set: ResultSetChoice | None = None
    expiry: datetime | None = None
    source_artifacts: list[bytes] = Field(default_factory=list)


class Coserv(BaseModel):
    """A complete decoded CoSERV document."""

    model_config = {"extra": "forbid", "frozen": True}

    profile: Profile | None = None
    query: Query | None = None
    results: ResultSet | None = None
