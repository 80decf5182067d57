"""Corpus sync engine for Gemini File Search stores."""

__version__ = "0.1.0"

from ragsync.models import (
    Document,
    RemoteStore,
    SyncConfig,
    SyncOptions,
    SyncResult,
    SyncStatus,
    UploadConfig,
)

__all__ = [
    "Document",
    "RemoteStore",
    "SyncConfig",
    "SyncOptions",
    "SyncResult",
    "SyncStatus",
    "UploadConfig",
    "__version__",
]
