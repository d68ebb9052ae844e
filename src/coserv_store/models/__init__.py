"""coserv-store data models - re-exports all public model classes."""

from coserv_store.models.config import StoreConfig
from coserv_store.models.corim import (
    INTERP_KEYS_EXT_ID,
    ClassMap,
    CryptoKey,
    CryptoKeyType,
    Digest,
    ElementMap,
    EnvironmentMap,
    FlagsMap,
    KeyType,
    MeasurementValues,
    Profile,
    TypedCryptoKey,
    VersionMap,
)
from coserv_store.models.coserv import (
    AkQuad,
    ArtifactType,
    Coserv,
    EndorsedValuesResult,
    EvQuad,
    KeyConditions,
    KeyTriple,
    Query,
    ReferenceTriple,
    ReferenceValuesResult,
    ResultSet,
    ResultType,
    RvQuad,
    TrustAnchorsResult,
)
from coserv_store.models.ect import CmType, Ect
from coserv_store.models.relations import (
    EvRelation,
    EvsRelation,
    EvsSeriesEntry,
    RelationBundle,
    RvRelation,
)

__all__ = [
    "INTERP_KEYS_EXT_ID",
    "AkQuad",
    "ArtifactType",
    "ClassMap",
    "CmType",
    "Coserv",
    "CryptoKey",
    "CryptoKeyType",
    "Digest",
    "Ect",
    "ElementMap",
    "EndorsedValuesResult",
    "EnvironmentMap",
    "EvQuad",
    "EvRelation",
    "EvsRelation",
    "EvsSeriesEntry",
    "FlagsMap",
    "KeyConditions",
    "KeyTriple",
    "KeyType",
    "MeasurementValues",
    "Profile",
    "Query",
    "ReferenceTriple",
    "ReferenceValuesResult",
    "RelationBundle",
    "ResultSet",
    "ResultType",
    "RvQuad",
    "RvRelation",
    "StoreConfig",
    "TrustAnchorsResult",
    "TypedCryptoKey",
    "VersionMap",
]
