"""coserv-store: translate CoSERV result documents into evaluation relations."""

import logging

from coserv_store.errors import (
    CapabilityMismatch,
    CoservStoreError,
    DecodeError,
    EmptyResultSet,
    MissingResults,
    NoRelevantQuads,
    RecordBuildError,
)
from coserv_store.models.relations import RelationBundle
from coserv_store.storage.mem_store import MemCoservStore, RelationStore
from coserv_store.translator import translate, translate_result_set

__version__ = "0.1.0"

logging.getLogger("coserv_store").addHandler(logging.NullHandler())

__all__ = [
    "CapabilityMismatch",
    "CoservStoreError",
    "DecodeError",
    "EmptyResultSet",
    "MemCoservStore",
    "MissingResults",
    "NoRelevantQuads",
    "RecordBuildError",
    "RelationBundle",
    "RelationStore",
    "__version__",
    "translate",
    "translate_result_set",
]
