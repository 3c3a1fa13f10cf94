"""Index administration: mappings, bulk import, locking and rebuilds."""

from scout_elastic.index.importer import import_all, iter_record_chunks
from scout_elastic.index.lock import LockInfo, RebuildLock
from scout_elastic.index.mapping import MappingAction, install_mapping
from scout_elastic.index.rebuild import (
    RebuildOrchestrator,
    RebuildState,
    RebuildStatus,
)

__all__ = [
    "LockInfo",
    "MappingAction",
    "RebuildLock",
    "RebuildOrchestrator",
    "RebuildState",
    "RebuildStatus",
    "import_all",
    "install_mapping",
    "iter_record_chunks",
]
