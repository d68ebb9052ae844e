"""Relation stores - in-memory aggregation of translated CoSERV results."""

from coserv_store.storage.mem_store import MemCoservStore, RelationStore

__all__ = ["MemCoservStore", "RelationStore"]
