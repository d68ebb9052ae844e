"""Shared CoSERV fixtures: wire-format documents built with cbor2."""

from __future__ import annotations

from datetime import datetime, timezone

import cbor2
import pytest
from cbor2 import CBORTag

EXPIRY = datetime(2030, 1, 1, tzinfo=timezone.utc)
# RAND-type UEID (type byte 0x01 plus 16 random bytes) and a raw key blob
UEID = bytes([0x01]) + bytes(range(0x10, 0x20))
AK_BYTES = bytes.fromhex("04a1b2c3d4")


def pkix_key(text: str) -> CBORTag:
    """A tagged pkix-base64-key crypto key."""
    return CBORTag(554, text)


def rv_quad(instance: str, claims: dict[str, str], authorities: list[str]) -> dict:
    """Wire-format reference-value quad for one instance environment."""
    return {
        1: [pkix_key(a) for a in authorities],
        2: [
            {1: instance},
            [{0: mkey, 1: {0: {0: version}}} for mkey, version in claims.items()],
        ],
    }


def ak_quad(
    instance: str,
    keys: list[str],
    authorities: list[str],
    conditions: dict | None = None,
) -> dict:
    """Wire-format trust-anchor quad for one instance environment."""
    triple: list = [{1: instance}, [pkix_key(k) for k in keys]]
    if conditions is not None:
        triple.append(conditions)
    return {1: [pkix_key(a) for a in authorities], 2: triple}


def claim_document(mval: dict, instance: object = "dev-A") -> dict:
    """Reference-values document with a single claim holding `mval`."""
    quad = {1: [pkix_key("CA-1")], 2: [{1: instance}, [{0: "hw", 1: mval}]]}
    return coserv_document({0: [quad]})


def coserv_document(results: dict | None, profile: object = "urn:example:p1") -> dict:
    """Wire-format CoSERV map with a reference-values query."""
    document: dict = {
        0: profile,
        1: {0: 2, 1: {"instances": ["dev-A"]}, 3: 0},
    }
    if results is not None:
        document[2] = results
    return document


@pytest.fixture
def rv_document_cbor() -> bytes:
    """The one-quad reference-values document (dev-A, fw-version 1.2.3, CA-1)."""
    results = {0: [rv_quad("dev-A", {"fw-version": "1.2.3"}, ["CA-1"])], 10: EXPIRY}
    return cbor2.dumps(coserv_document(results))


@pytest.fixture
def ta_document_cbor() -> bytes:
    """A trust-anchors document with two keys for dev-B."""
    results = {
        1: [
            ak_quad(
                "dev-B",
                ["AK-1", "AK-2"],
                ["CA-2"],
                conditions={0: "attest", 1: [pkix_key("OWNER")]},
            )
        ],
        10: EXPIRY,
    }
    return cbor2.dumps(coserv_document(results))


@pytest.fixture
def empty_rv_document_cbor() -> bytes:
    """A reference-values document whose quad list is empty."""
    return cbor2.dumps(coserv_document({0: [], 10: EXPIRY}))


@pytest.fixture
def ta_bytes_document_cbor() -> bytes:
    """Trust anchor for a UEID-named device: a raw-bytes key vouched for by a thumbprint."""
    quad = {
        1: [CBORTag(557, [1, b"\xca\xfe"])],
        2: [{1: CBORTag(550, UEID)}, [CBORTag(560, AK_BYTES)]],
    }
    return cbor2.dumps(coserv_document({1: [quad], 10: EXPIRY}))
