"""In-memory relation store for translated CoSERV results.

Accumulates relation bundles from repeated decode+translate calls and
exposes them to an evaluation engine as three independent sequences.
The store is specialized for CoSERV result bundles; raw evidence or
endorsement documents are rejected with CapabilityMismatch.

The store holds no locks. A single owner is expected to fill it before
handing it to a read-only evaluator.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from coserv_store.errors import CapabilityMismatch
from coserv_store.loader.validator import InputFormat, decode_document
from coserv_store.models.relations import (
    EvRelation,
    EvsRelation,
    RelationBundle,
    RvRelation,
)
from coserv_store.translator import translate

log = logging.getLogger(__name__)


class RelationStore(ABC):
    """Read surface every relation store offers to an evaluation engine."""

    @abstractmethod
    def iterate_rv(self) -> tuple[RvRelation, ...]:
        """Snapshot of the reference-value relations."""

    @abstractmethod
    def iterate_ev(self) -> tuple[EvRelation, ...]:
        """Snapshot of the endorsement relations."""

    @abstractmethod
    def iterate_evs(self) -> tuple[EvsRelation, ...]:
        """Snapshot of the endorsement-series relations."""

    @abstractmethod
    def accept_raw_evidence_document(self, document: Any) -> None:
        """Add relations from a raw evidence/endorsement document."""


class MemCoservStore(RelationStore):
    """Append-only in-memory store of relations from CoSERV results.

    Every operation either fully succeeds or leaves the store as it was:
    documents are decoded and translated before anything is merged.
    """

    SPECIALIZATION = "this store holds CoSERV results instead"

    def __init__(self) -> None:
        self.items = RelationBundle()

    def __len__(self) -> int:
        return len(self.items)

    def merge(self, bundle: RelationBundle) -> None:
        """Move every record of ``bundle`` into the store.

        ``bundle`` is left empty and may be reused as a fresh accumulator.
        """
        log.debug(
            "Merging bundle: %d rv, %d ev, %d evs relation(s)",
            len(bundle.rv_list),
            len(bundle.ev_list),
            len(bundle.evs_list),
        )
        self.items.append(bundle)

    def ingest(self, data: bytes, fmt: InputFormat = "cbor") -> RelationBundle:
        """Decode and translate one document, then merge its relations.

        Args:
            data: Encoded CoSERV document.
            fmt: Input encoding, 'cbor' or 'json'.

        Returns:
            A copy of the bundle contributed by this document.

        Raises:
            DecodeError: If the bytes are not a valid CoSERV document.
            MissingResults, EmptyResultSet, NoRelevantQuads, RecordBuildError:
                Propagated from the translator.
        """
        document = decode_document(data, fmt)
        bundle = translate(document)
        contributed = RelationBundle()
        contributed.extend(bundle)
        self.merge(bundle)
        log.debug("Ingested %d relation(s); store holds %d", len(contributed), len(self))
        return contributed

    def iterate_rv(self) -> tuple[RvRelation, ...]:
        return tuple(self.items.rv_list)

    def iterate_ev(self) -> tuple[EvRelation, ...]:
        return tuple(self.items.ev_list)

    def iterate_evs(self) -> tuple[EvsRelation, ...]:
        return tuple(self.items.evs_list)

    def accept_raw_evidence_document(self, document: Any) -> None:
        """Always rejected; this store only takes CoSERV result bundles.

        Raises:
            CapabilityMismatch: On every call, without touching the store.
        """
        raise CapabilityMismatch("raw evidence documents", self.SPECIALIZATION)
