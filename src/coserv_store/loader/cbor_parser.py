"""CBOR parser mapping the CoSERV wire encoding to named fields.

CoSERV maps use small integer keys and CBOR tags to mark identifier and
key encodings. This module decodes the bytes with cbor2 and rewrites the
result into plain dicts keyed by the field names of the pydantic models
in coserv_store.models, so the validation stage can stay encoding-free.

Unknown keys are kept (as strings) so validation reports them, except in
measurement values maps where they are carried as extensions.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable
from typing import Any

import cbor2
from cbor2 import CBORTag


class CBORParseError(Exception):
    """Raised when bytes are not CBOR or do not follow the CoSERV layout.

    Attributes:
        message: Human-readable description of the problem.
        path: Dotted path of the offending item, or '<root>'.
    """

    def __init__(self, message: str, path: str = "<root>") -> None:
        self.message = message
        self.path = path
        super().__init__(f"{path}: {message}")


Converter = Callable[[Any, str], Any]

TAG_UUID = 37
TAG_OID = 111
TAG_UEID = 550
TAG_SVN = 552
TAG_MIN_SVN = 553
TAG_BYTES = 560
TAG_MASKED_RAW_VALUE = 563

CRYPTO_KEY_TAGS: dict[int, str] = {
    554: "pkix-base64-key",
    555: "pkix-base64-cert",
    556: "pkix-base64-cert-path",
    557: "thumbprint",
    558: "cose-key",
    559: "cert-thumbprint",
    560: "bytes",
    561: "cert-path-thumbprint",
}
_THUMBPRINT_TAGS = {557, 559, 561}

FLAG_NAMES: dict[int, str] = {
    0: "is_configured",
    1: "is_secure",
    2: "is_recovery",
    3: "is_debug",
    4: "is_replay_protected",
    5: "is_integrity_protected",
    6: "is_runtime_measured",
    7: "is_immutable",
    8: "is_tcb",
    9: "is_confidentiality_protected",
}

ARTIFACT_TYPES: dict[int, str] = {
    0: "endorsed-values",
    1: "trust-anchors",
    2: "reference-values",
}
RESULT_TYPES: dict[int, str] = {
    0: "collected-artifacts",
    1: "source-artifacts",
    2: "both",
}
# result-set-map key -> (variant tag, quad list field)
RESULT_SET_QUADS: dict[int, tuple[str, str]] = {
    0: ("reference-values", "rv_quads"),
    1: ("trust-anchors", "ak_quads"),
    2: ("endorsed-values", "ev_quads"),
}
RESULT_EXPIRY = 10
RESULT_SOURCE_ARTIFACTS = 11


def _child(path: str, name: str | int) -> str:
    if isinstance(name, int):
        return f"{path}[{name}]"
    return name if path == "<root>" else f"{path}.{name}"


def _expect_map(value: Any, path: str) -> dict:
    if not isinstance(value, dict):
        raise CBORParseError(f"expected a map, got {type(value).__name__}", path)
    return value


def _expect_list(value: Any, path: str) -> list:
    if not isinstance(value, list):
        raise CBORParseError(f"expected an array, got {type(value).__name__}", path)
    return value


def _check_key(key: Any, path: str) -> None:
    # True == 1 in Python, so a boolean key would alias an integer field
    if isinstance(key, bool):
        raise CBORParseError(f"boolean map key {key!r}", path)


def _list_of(converter: Converter) -> Converter:
    def convert(value: Any, path: str) -> list:
        items = _expect_list(value, path)
        return [converter(item, _child(path, i)) for i, item in enumerate(items)]

    return convert


def _map(
    value: Any,
    path: str,
    fields: dict[int, tuple[str, Converter | None]],
) -> dict[str, Any]:
    """Rename integer keys to field names, converting values on the way."""
    out: dict[str, Any] = {}
    for key, item in _expect_map(value, path).items():
        _check_key(key, path)
        if key in fields:
            name, converter = fields[key]
            out[name] = converter(item, _child(path, name)) if converter else item
        else:
            out[str(key)] = item
    return out


def oid_to_dotted(data: bytes, path: str = "<root>") -> str:
    """Decode BER-encoded OID content bytes to dotted-decimal form."""
    if not data:
        raise CBORParseError("empty OID", path)
    arcs: list[int] = []
    value = 0
    for byte in data:
        value = (value << 7) | (byte & 0x7F)
        if not byte & 0x80:
            arcs.append(value)
            value = 0
    if data[-1] & 0x80:
        raise CBORParseError("truncated OID", path)
    first = arcs[0]
    if first < 40:
        head = [0, first]
    elif first < 80:
        head = [1, first - 40]
    else:
        head = [2, first - 80]
    return ".".join(str(arc) for arc in head + arcs[1:])


def _profile(value: Any, path: str) -> dict[str, str]:
    if isinstance(value, str):
        return {"kind": "uri", "value": value}
    if isinstance(value, CBORTag) and value.tag == TAG_OID and isinstance(value.value, bytes):
        return {"kind": "oid", "value": oid_to_dotted(value.value, path)}
    raise CBORParseError("profile must be a URI string or a tagged OID", path)


def _identifier(value: Any, path: str) -> Any:
    if isinstance(value, (str, bytes, int)):
        return value
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, CBORTag):
        if value.tag == TAG_UUID and isinstance(value.value, bytes):
            return str(uuid.UUID(bytes=value.value))
        if value.tag == TAG_OID and isinstance(value.value, bytes):
            return oid_to_dotted(value.value, path)
        if value.tag == TAG_UEID and isinstance(value.value, bytes):
            return value.value
        raise CBORParseError(f"unsupported identifier tag {value.tag}", path)
    raise CBORParseError(f"unsupported identifier type {type(value).__name__}", path)


def _mkey(value: Any, path: str) -> Any:
    if isinstance(value, (str, int)) and not isinstance(value, bool):
        return value
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, CBORTag) and value.tag == TAG_UUID and isinstance(value.value, bytes):
        return str(uuid.UUID(bytes=value.value))
    raise CBORParseError("measurement key must be text, an integer or a UUID", path)


def _digest(value: Any, path: str) -> dict[str, Any]:
    items = _expect_list(value, path)
    if len(items) != 2:
        raise CBORParseError("digest must be [alg, value]", path)
    return {"alg": items[0], "value": items[1]}


def _crypto_key(value: Any, path: str) -> dict[str, Any]:
    if not isinstance(value, CBORTag) or value.tag not in CRYPTO_KEY_TAGS:
        raise CBORParseError("expected a tagged crypto key", path)
    content = value.value
    if value.tag in _THUMBPRINT_TAGS:
        content = _digest(content, path)
    elif isinstance(content, dict):
        # COSE_Key maps are kept in their encoded form
        content = cbor2.dumps(content)
    return {"type": CRYPTO_KEY_TAGS[value.tag], "value": content}


_crypto_keys = _list_of(_crypto_key)


def _class_map(value: Any, path: str) -> dict[str, Any]:
    return _map(
        value,
        path,
        {
            0: ("class_id", _identifier),
            1: ("vendor", None),
            2: ("model", None),
            3: ("layer", None),
            4: ("index", None),
        },
    )


def _environment(value: Any, path: str) -> dict[str, Any]:
    return _map(
        value,
        path,
        {
            0: ("class", _class_map),
            1: ("instance", _identifier),
            2: ("group", _identifier),
        },
    )


def _version(value: Any, path: str) -> dict[str, Any]:
    if isinstance(value, str):
        return {"version": value}
    return _map(value, path, {0: ("version", None), 1: ("version_scheme", None)})


def _svn(value: Any, path: str) -> dict[str, int]:
    if isinstance(value, int) and not isinstance(value, bool):
        return {"svn": value}
    if isinstance(value, CBORTag) and isinstance(value.value, int):
        if value.tag == TAG_SVN:
            return {"svn": value.value}
        if value.tag == TAG_MIN_SVN:
            return {"min_svn": value.value}
    raise CBORParseError("svn must be an integer or a tagged svn/min-svn", path)


def _raw_value(value: Any, path: str) -> dict[str, bytes]:
    if isinstance(value, bytes):
        return {"raw_value": value}
    if isinstance(value, CBORTag):
        if value.tag == TAG_BYTES and isinstance(value.value, bytes):
            return {"raw_value": value.value}
        if value.tag == TAG_MASKED_RAW_VALUE:
            items = _expect_list(value.value, path)
            if len(items) == 2 and all(isinstance(item, bytes) for item in items):
                return {"raw_value": items[0], "raw_value_mask": items[1]}
            raise CBORParseError("masked raw value must be [value, mask]", path)
    raise CBORParseError("raw value must be tagged bytes or a masked raw value", path)


def _ueid(value: Any, path: str) -> Any:
    if isinstance(value, CBORTag) and value.tag == TAG_UEID:
        return value.value
    return value


def _uuid(value: Any, path: str) -> Any:
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, CBORTag) and value.tag == TAG_UUID:
        value = value.value
    if isinstance(value, bytes):
        if len(value) != 16:
            raise CBORParseError("UUID must be 16 bytes", path)
        return str(uuid.UUID(bytes=value))
    raise CBORParseError("expected a UUID", path)


def _flags(value: Any, path: str) -> dict[str, Any]:
    return _map(value, path, {key: (name, None) for key, name in FLAG_NAMES.items()})


def _integrity_registers(value: Any, path: str) -> dict[Any, Any]:
    registers: dict[Any, Any] = {}
    for index, digests in _expect_map(value, path).items():
        if isinstance(index, bool) or not isinstance(index, (int, str)):
            raise CBORParseError("register index must be an integer or text", path)
        registers[index] = _list_of(_digest)(digests, _child(path, index))
    return registers


# values-map key -> converter returning the named fields it fills
_MVAL_MULTI: dict[int, tuple[str, Converter]] = {
    1: ("svn", _svn),
    4: ("raw_value", _raw_value),
}

_MVAL_FIELDS: dict[int, tuple[str, Converter | None]] = {
    0: ("version", _version),
    2: ("digests", _list_of(_digest)),
    3: ("flags", _flags),
    5: ("raw_value_mask", None),
    6: ("mac_addr", None),
    7: ("ip_addr", None),
    8: ("serial_number", None),
    9: ("ueid", _ueid),
    10: ("uuid", _uuid),
    11: ("name", None),
    13: ("cryptokeys", _crypto_keys),
    14: ("integrity_registers", _integrity_registers),
}


def _mval(value: Any, path: str) -> dict[str, Any]:
    out: dict[str, Any] = {}
    extensions: dict[int, Any] = {}
    for key, item in _expect_map(value, path).items():
        _check_key(key, path)
        if key in _MVAL_MULTI:
            name, converter = _MVAL_MULTI[key]
            out.update(converter(item, _child(path, name)))
        elif key in _MVAL_FIELDS:
            name, converter = _MVAL_FIELDS[key]
            out[name] = converter(item, _child(path, name)) if converter else item
        elif isinstance(key, int):
            extensions[key] = item
        else:
            raise CBORParseError(f"non-integer key {key!r} in values map", path)
    if extensions:
        out["extensions"] = extensions
    return out


def _measurement(value: Any, path: str) -> dict[str, Any]:
    return _map(value, path, {0: ("mkey", _mkey), 1: ("mval", _mval)})


_measurements = _list_of(_measurement)


def _triple_items(value: Any, path: str, lengths: tuple[int, ...]) -> list:
    items = _expect_list(value, path)
    if len(items) not in lengths:
        raise CBORParseError(
            f"triple must have {' or '.join(str(n) for n in lengths)} items", path
        )
    return items


def _rv_triple(value: Any, path: str) -> dict[str, Any]:
    env, claims = _triple_items(value, path, (2,))
    return {
        "ref_env": _environment(env, _child(path, "ref_env")),
        "ref_claims": _measurements(claims, _child(path, "ref_claims")),
    }


def _conditions(value: Any, path: str) -> dict[str, Any]:
    return _map(value, path, {0: ("mkey", _mkey), 1: ("authorized_by", _crypto_keys)})


def _ak_triple(value: Any, path: str) -> dict[str, Any]:
    items = _triple_items(value, path, (2, 3))
    out = {
        "environment": _environment(items[0], _child(path, "environment")),
        "key_list": _crypto_keys(items[1], _child(path, "key_list")),
    }
    if len(items) == 3:
        out["conditions"] = _conditions(items[2], _child(path, "conditions"))
    return out


def _ev_triple(value: Any, path: str) -> dict[str, Any]:
    env, claims = _triple_items(value, path, (2,))
    return {
        "environment": _environment(env, _child(path, "environment")),
        "claims": _measurements(claims, _child(path, "claims")),
    }


def _quad(triple: Converter) -> Converter:
    def convert(value: Any, path: str) -> dict[str, Any]:
        return _map(value, path, {1: ("authorities", _crypto_keys), 2: ("triple", triple)})

    return convert


_QUAD_CONVERTERS: dict[str, Converter] = {
    "rv_quads": _list_of(_quad(_rv_triple)),
    "ak_quads": _list_of(_quad(_ak_triple)),
    "ev_quads": _list_of(_quad(_ev_triple)),
}


def _results(value: Any, path: str) -> dict[str, Any]:
    raw = _expect_map(value, path)
    for key in raw:
        _check_key(key, path)
    out: dict[str, Any] = {}
    quad_keys = [key for key in raw if key in RESULT_SET_QUADS]
    if len(quad_keys) > 1:
        raise CBORParseError("result set carries more than one quad list", path)
    for key, item in raw.items():
        if key in RESULT_SET_QUADS:
            variant, field = RESULT_SET_QUADS[key]
            quads = _QUAD_CONVERTERS[field](item, _child(_child(path, "result_set"), field))
            out["result_set"] = {"type": variant, field: quads}
        elif key == RESULT_EXPIRY:
            out["expiry"] = item
        elif key == RESULT_SOURCE_ARTIFACTS:
            out["source_artifacts"] = item
        else:
            out[str(key)] = item
    return out


def _enum(table: dict[int, str]) -> Converter:
    def convert(value: Any, path: str) -> Any:
        if isinstance(value, str):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            # unknown codes pass through for validation to report
            return table.get(value, value)
        raise CBORParseError(f"expected an integer code, got {type(value).__name__}", path)

    return convert


def _query(value: Any, path: str) -> dict[str, Any]:
    return _map(
        value,
        path,
        {
            0: ("artifact_type", _enum(ARTIFACT_TYPES)),
            1: ("environment_selector", None),
            2: ("timestamp", None),
            3: ("result_type", _enum(RESULT_TYPES)),
        },
    )


def parse_cbor(data: bytes) -> dict[str, Any]:
    """Decode CoSERV CBOR bytes into a dict of named fields.

    Args:
        data: The encoded CoSERV document.

    Returns:
        Dict ready for validation against the Coserv model.

    Raises:
        CBORParseError: If the bytes are not CBOR or break the CoSERV layout.
    """
    if not data:
        raise CBORParseError("input is empty")
    try:
        raw = cbor2.loads(data)
    except (cbor2.CBORDecodeError, ValueError) as e:
        raise CBORParseError(f"invalid CBOR: {e}") from e
    return _map(
        raw,
        "<root>",
        {0: ("profile", _profile), 1: ("query", _query), 2: ("results", _results)},
    )
