"""Store resolution, diffing and orchestration of sync runs."""

from ragsync.sync.differ import compute_upload_set, discover_documents
from ragsync.sync.locks import KeyedFifoLock
from ragsync.sync.orchestrator import SyncOrchestrator
from ragsync.sync.stores import RemoteStoreDirectory, select_canonical

__all__ = [
    "KeyedFifoLock",
    "RemoteStoreDirectory",
    "SyncOrchestrator",
    "compute_upload_set",
    "discover_documents",
    "select_canonical",
]
