"""Tests for the in-memory relation store (MemCoservStore)."""

from __future__ import annotations

import cbor2
import pytest

from conftest import AK_BYTES, EXPIRY, UEID, coserv_document, rv_quad
from coserv_store.errors import (
    CapabilityMismatch,
    DecodeError,
    EmptyResultSet,
    MissingResults,
    NoRelevantQuads,
)
from coserv_store.models import (
    CmType,
    CryptoKey,
    CryptoKeyType,
    Ect,
    EnvironmentMap,
    EvRelation,
    RelationBundle,
    RvRelation,
)
from coserv_store.storage.mem_store import MemCoservStore, RelationStore


def _rv_relation(instance: str) -> RvRelation:
    env = EnvironmentMap(instance=instance)
    return RvRelation(
        condition=Ect.build(kind=CmType.REFERENCE_VALUES, environment=env),
        addition=Ect.build(
            kind=CmType.REFERENCE_VALUES,
            environment=env,
            authorities=[CryptoKey(type=CryptoKeyType.PKIX_BASE64_KEY, value="CA-1")],
        ),
    )


def _ev_relation(instance: str) -> EvRelation:
    return EvRelation(
        condition=[
            Ect.build(kind=CmType.ENDORSEMENTS, environment=EnvironmentMap(instance=instance))
        ],
        addition=[
            Ect.build(
                kind=CmType.ENDORSEMENTS,
                authorities=[CryptoKey(type=CryptoKeyType.PKIX_BASE64_KEY, value="CA-2")],
            )
        ],
    )


def _instances(relations) -> list[str]:
    return [r.condition.environment.instance for r in relations]


def _counts(store: MemCoservStore) -> tuple[int, int, int]:
    return len(store.iterate_rv()), len(store.iterate_ev()), len(store.iterate_evs())


class TestMerge:
    """Tests for merging bundles."""

    def test_new_store_is_empty(self):
        store = MemCoservStore()
        assert isinstance(store, RelationStore)
        assert _counts(store) == (0, 0, 0)
        assert len(store) == 0

    def test_merge_moves_records_and_empties_bundle(self):
        """merge transfers every record and leaves the bundle reusable."""
        store = MemCoservStore()
        bundle = RelationBundle(rv_list=[_rv_relation("a")], ev_list=[_ev_relation("b")])
        store.merge(bundle)
        assert _counts(store) == (1, 1, 0)
        assert bundle.is_empty()

        bundle.rv_list.append(_rv_relation("c"))
        store.merge(bundle)
        assert _instances(store.iterate_rv()) == ["a", "c"]

    def test_merge_order_follows_call_order(self):
        """Contents depend only on which bundles were merged, in call order."""
        first = MemCoservStore()
        first.merge(RelationBundle(rv_list=[_rv_relation("a")]))
        first.merge(RelationBundle(rv_list=[_rv_relation("b")]))

        second = MemCoservStore()
        second.merge(RelationBundle(rv_list=[_rv_relation("b")]))
        second.merge(RelationBundle(rv_list=[_rv_relation("a")]))

        assert _instances(first.iterate_rv()) == ["a", "b"]
        assert _instances(second.iterate_rv()) == ["b", "a"]
        assert sorted(_instances(first.iterate_rv())) == sorted(_instances(second.iterate_rv()))

    def test_merge_empty_bundle(self):
        store = MemCoservStore()
        store.merge(RelationBundle())
        assert len(store) == 0


class TestIterate:
    """Tests for snapshot iteration."""

    def test_snapshot_not_affected_by_later_merge(self):
        """A sequence already produced does not see later records."""
        store = MemCoservStore()
        store.merge(RelationBundle(rv_list=[_rv_relation("a")]))
        snapshot = store.iterate_rv()
        store.merge(RelationBundle(rv_list=[_rv_relation("b")]))
        assert _instances(snapshot) == ["a"]
        assert _instances(store.iterate_rv()) == ["a", "b"]

    def test_snapshot_is_restartable(self):
        """The same sequence can be iterated more than once."""
        store = MemCoservStore()
        store.merge(RelationBundle(ev_list=[_ev_relation("a"), _ev_relation("b")]))
        snapshot = store.iterate_ev()
        assert list(snapshot) == list(snapshot)
        assert len(list(snapshot)) == 2

    def test_sequences_are_independent(self):
        store = MemCoservStore()
        store.merge(RelationBundle(rv_list=[_rv_relation("a")], ev_list=[_ev_relation("b")]))
        assert len(store.iterate_rv()) == 1
        assert len(store.iterate_ev()) == 1
        assert store.iterate_evs() == ()


class TestIngest:
    """Tests for decode+translate+merge."""

    def test_ingest_reference_values(self, rv_document_cbor):
        """The example document contributes one rv relation."""
        store = MemCoservStore()
        contributed = store.ingest(rv_document_cbor)
        assert len(contributed.rv_list) == 1
        assert _counts(store) == (1, 0, 0)

        rel = store.iterate_rv()[0]
        assert rel.condition.environment.instance == "dev-A"
        assert rel.addition.authorities[0].value == "CA-1"
        assert rel.addition.profile.value == "urn:example:p1"

    def test_ingest_multiple_documents_accumulates(self, rv_document_cbor, ta_document_cbor):
        store = MemCoservStore()
        store.ingest(rv_document_cbor)
        store.ingest(ta_document_cbor)
        store.ingest(rv_document_cbor)
        assert _counts(store) == (2, 1, 0)

    def test_contributed_bundle_is_a_copy(self, rv_document_cbor):
        """Changing the returned bundle does not change the store."""
        store = MemCoservStore()
        contributed = store.ingest(rv_document_cbor)
        contributed.rv_list.clear()
        assert len(store.iterate_rv()) == 1

    def test_decode_failure_leaves_store_untouched(self, rv_document_cbor):
        store = MemCoservStore()
        store.ingest(rv_document_cbor)
        with pytest.raises(DecodeError):
            store.ingest(b"\xa1\x00")
        assert _counts(store) == (1, 0, 0)

    def test_translation_failures_leave_store_untouched(self, rv_document_cbor):
        """MissingResults, EmptyResultSet and NoRelevantQuads add nothing."""
        store = MemCoservStore()
        store.ingest(rv_document_cbor)

        with pytest.raises(MissingResults):
            store.ingest(cbor2.dumps(coserv_document(None)))
        with pytest.raises(EmptyResultSet):
            store.ingest(cbor2.dumps(coserv_document({10: EXPIRY})))
        with pytest.raises(NoRelevantQuads):
            store.ingest(cbor2.dumps(coserv_document({0: []})))

        assert _counts(store) == (1, 0, 0)

    def test_unsupported_variant_rejected(self):
        """Endorsed-value quads are not stored."""
        quad = rv_quad("dev-C", {"fw": "1"}, ["CA-1"])
        store = MemCoservStore()
        with pytest.raises(NoRelevantQuads) as exc_info:
            store.ingest(cbor2.dumps(coserv_document({2: [quad]})))
        assert exc_info.value.variant == "endorsed-values"
        assert len(store) == 0

    def test_ingest_json(self):
        store = MemCoservStore()
        data = (
            b'{"profile": "urn:example:p1", "results": {"result_set": '
            b'{"type": "trust-anchors", "ak_quads": [{"authorities": '
            b'[{"type": "pkix-base64-key", "value": "CA-2"}], "triple": '
            b'{"environment": {"instance": "dev-B"}, "key_list": '
            b'[{"type": "pkix-base64-key", "value": "AK-1"}]}}]}}}'
        )
        store.ingest(data, fmt="json")
        assert _counts(store) == (0, 1, 0)
        typed = store.iterate_ev()[0].condition[0].elements[0].mval.typed_crypto_key()
        assert typed.key.value == "AK-1"


    def test_ingest_bytes_key(self, ta_bytes_document_cbor):
        """A raw-bytes key for a UEID-named device is stored unchanged."""
        store = MemCoservStore()
        store.ingest(ta_bytes_document_cbor)
        condition = store.iterate_ev()[0].condition[0]
        assert condition.environment.instance == UEID
        typed = condition.elements[0].mval.typed_crypto_key()
        assert typed.key == CryptoKey(type=CryptoKeyType.BYTES, value=AK_BYTES)

    def test_non_scalar_query_code_is_decode_error(self, rv_document_cbor):
        """Malformed query codes surface as DecodeError and add nothing."""
        store = MemCoservStore()
        store.ingest(rv_document_cbor)
        with pytest.raises(DecodeError):
            store.ingest(cbor2.dumps({0: "urn:x", 1: {0: [1]}, 2: {0: []}}))
        assert _counts(store) == (1, 0, 0)

class TestCapabilityBoundary:
    """Tests for raw evidence rejection."""

    def test_raw_evidence_rejected_on_empty_store(self):
        store = MemCoservStore()
        with pytest.raises(CapabilityMismatch) as exc_info:
            store.accept_raw_evidence_document({"corim": "..."})
        assert "CoSERV results" in str(exc_info.value)
        assert len(store) == 0

    def test_raw_evidence_rejected_without_mutation(self, rv_document_cbor):
        store = MemCoservStore()
        store.ingest(rv_document_cbor)
        before = store.iterate_rv()
        with pytest.raises(CapabilityMismatch):
            store.accept_raw_evidence_document(b"\x00")
        assert store.iterate_rv() == before
        assert _counts(store) == (1, 0, 0)
