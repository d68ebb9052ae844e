"""Attestation value types shared by CoSERV documents and ECT records.

Environments, measurement claims, crypto keys and profiles are copied
verbatim from decoded documents into relation records, so every type
here is a frozen value object.
"""

from __future__ import annotations

import base64
import re
from enum import Enum
from typing import Any, Literal
from uuid import UUID

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)

# Extension id under which a TypedCryptoKey is attached to a measurement
# values map. Downstream evaluators look keys up by this id.
INTERP_KEYS_EXT_ID = -1

_VALUE_CONFIG: ConfigDict = {
    "extra": "forbid",
    "frozen": True,
    "ser_json_bytes": "base64",
    "val_json_bytes": "base64",
}

_DOTTED_OID = re.compile(r"^[0-2](\.\d+)+$")


# Fields typed as text or bytes write bytes to JSON as {"bytes": "<base64>"}
# so a byte string is not read back as text.
def _bytes_from_tagged(value: Any) -> Any:
    if isinstance(value, dict) and set(value) == {"bytes"} and isinstance(value["bytes"], str):
        return base64.b64decode(value["bytes"], validate=True)
    return value


def _bytes_to_tagged(value: Any) -> Any:
    if isinstance(value, bytes):
        return {"bytes": base64.b64encode(value).decode("ascii")}
    return value


Identifier = str | bytes | int
MeasurementKey = str | int


class ClassMap(BaseModel):
    """Class portion of an environment (who made it, what it is)."""

    model_config = _VALUE_CONFIG

    class_id: Identifier | None = None
    vendor: str | None = None
    model: str | None = None
    layer: int | None = None
    index: int | None = None

    @field_validator("class_id", mode="before")
    @classmethod
    def _read_tagged_bytes(cls, v: Any) -> Any:
        return _bytes_from_tagged(v)

    @field_serializer("class_id", when_used="json")
    def _write_tagged_bytes(self, v: Any) -> Any:
        return _bytes_to_tagged(v)


class EnvironmentMap(BaseModel):
    """The entity or class of entities an evidence claim is about."""

    model_config = {**_VALUE_CONFIG, "populate_by_name": True}

    class_: ClassMap | None = Field(default=None, alias="class")
    instance: Identifier | None = None
    group: Identifier | None = None

    @field_validator("instance", "group", mode="before")
    @classmethod
    def _read_tagged_bytes(cls, v: Any) -> Any:
        return _bytes_from_tagged(v)

    @field_serializer("instance", "group", when_used="json")
    def _write_tagged_bytes(self, v: Any) -> Any:
        return _bytes_to_tagged(v)


class CryptoKeyType(str, Enum):
    PKIX_BASE64_KEY = "pkix-base64-key"
    PKIX_BASE64_CERT = "pkix-base64-cert"
    PKIX_BASE64_CERT_PATH = "pkix-base64-cert-path"
    THUMBPRINT = "thumbprint"
    COSE_KEY = "cose-key"
    CERT_THUMBPRINT = "cert-thumbprint"
    BYTES = "bytes"
    CERT_PATH_THUMBPRINT = "cert-path-thumbprint"


class Digest(BaseModel):
    """A hash algorithm identifier and digest value."""

    model_config = _VALUE_CONFIG

    alg: int | str
    value: bytes


class CryptoKey(BaseModel):
    """Key material or an authority identity, tagged with its encoding."""

    model_config = _VALUE_CONFIG

    type: CryptoKeyType
    value: str | bytes | Digest

    @field_validator("value", mode="before")
    @classmethod
    def _read_tagged_bytes(cls, v: Any) -> Any:
        return _bytes_from_tagged(v)

    @field_serializer("value", when_used="json")
    def _write_tagged_bytes(self, v: Any) -> Any:
        return _bytes_to_tagged(v)


class KeyType(str, Enum):
    """Cryptographic role of a key carried in a TypedCryptoKey."""

    ATTEST_KEY = "attest-key"
    IDENTITY_KEY = "identity-key"


class TypedCryptoKey(BaseModel):
    """A raw key tagged with the role it plays for the evaluator."""

    model_config = _VALUE_CONFIG

    key: CryptoKey
    key_type: KeyType


class VersionMap(BaseModel):
    model_config = _VALUE_CONFIG

    version: str
    version_scheme: int | None = None


class FlagsMap(BaseModel):
    """Operational state flags of an environment."""

    model_config = _VALUE_CONFIG

    is_configured: bool | None = None
    is_secure: bool | None = None
    is_recovery: bool | None = None
    is_debug: bool | None = None
    is_replay_protected: bool | None = None
    is_integrity_protected: bool | None = None
    is_runtime_measured: bool | None = None
    is_immutable: bool | None = None
    is_tcb: bool | None = None
    is_confidentiality_protected: bool | None = None


class MeasurementValues(BaseModel):
    """Measured values of a claim plus an integer-keyed extension sidecar.

    ``svn`` is an exact security version and ``min_svn`` a lower bound; a
    claim carries at most one of them. Extensions hold values under ids
    with no named field and are kept as-is; only INTERP_KEYS_EXT_ID has a
    typed accessor.
    """

    model_config = _VALUE_CONFIG

    version: VersionMap | None = None
    svn: int | None = Field(default=None, ge=0)
    min_svn: int | None = Field(default=None, ge=0)
    digests: list[Digest] = Field(default_factory=list)
    flags: FlagsMap | None = None
    raw_value: bytes | None = None
    raw_value_mask: bytes | None = None
    mac_addr: bytes | None = None
    ip_addr: bytes | None = None
    serial_number: str | None = None
    ueid: bytes | None = None
    uuid: str | None = None
    name: str | None = None
    cryptokeys: list[CryptoKey] = Field(default_factory=list)
    integrity_registers: dict[int | str, list[Digest]] = Field(default_factory=dict)
    extensions: dict[int, Any] = Field(default_factory=dict)

    @field_validator("mac_addr")
    @classmethod
    def _check_mac_addr(cls, v: bytes | None) -> bytes | None:
        if v is not None and len(v) not in (6, 8):
            raise ValueError("mac-addr must be 6 or 8 bytes (EUI-48 or EUI-64)")
        return v

    @field_validator("ip_addr")
    @classmethod
    def _check_ip_addr(cls, v: bytes | None) -> bytes | None:
        if v is not None and len(v) not in (4, 16):
            raise ValueError("ip-addr must be 4 or 16 bytes (IPv4 or IPv6)")
        return v

    @field_validator("uuid")
    @classmethod
    def _normalize_uuid(cls, v: str | None) -> str | None:
        return None if v is None else str(UUID(v))

    @model_validator(mode="after")
    def _check_not_empty(self) -> MeasurementValues:
        if self.svn is not None and self.min_svn is not None:
            raise ValueError("svn and min_svn are mutually exclusive")
        if all(getattr(self, name) in (None, [], {}) for name in type(self).model_fields):
            raise ValueError("measurement values map must not be empty")
        return self

    def with_extension(self, ext_id: int, value: Any) -> MeasurementValues:
        """Return a copy with ``value`` attached under ``ext_id``."""
        extensions = dict(self.extensions)
        extensions[ext_id] = value
        return self.model_copy(update={"extensions": extensions})

    def typed_crypto_key(self) -> TypedCryptoKey | None:
        """Return the TypedCryptoKey stored under INTERP_KEYS_EXT_ID, if any."""
        value = self.extensions.get(INTERP_KEYS_EXT_ID)
        if value is None or isinstance(value, TypedCryptoKey):
            return value
        return TypedCryptoKey.model_validate(value)


class ElementMap(BaseModel):
    """A measurement claim: optional key plus its values."""

    model_config = _VALUE_CONFIG

    mkey: MeasurementKey | None = None
    mval: MeasurementValues


class Profile(BaseModel):
    """Scheme/version identifier scoping how claims are interpreted.

    A bare string is accepted: dotted-decimal arcs become an OID profile,
    anything else a URI profile.
    """

    model_config = _VALUE_CONFIG

    kind: Literal["oid", "uri"]
    value: str

    @model_validator(mode="before")
    @classmethod
    def _coerce_string(cls, data: Any) -> Any:
        if isinstance(data, str):
            kind = "oid" if _DOTTED_OID.match(data) else "uri"
            return {"kind": kind, "value": data}
        return data
