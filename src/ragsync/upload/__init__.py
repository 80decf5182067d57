"""Upload pipeline for the Gemini File Search API.

Public API
----------
.. autoclass:: GeminiStoreClient
.. autoclass:: DocumentUploader
.. autoclass:: UploadLedger
.. autoclass:: SyncProgressTracker
"""

from ragsync.upload.client import (
    GeminiStoreClient,
    PermanentError,
    RateLimitError,
    TransientError,
)
from ragsync.upload.content_types import resolve_content_type
from ragsync.upload.ledger import DedupResult, UploadLedger
from ragsync.upload.progress import SyncProgressTracker
from ragsync.upload.uploader import DocumentUploader

__all__ = [
    "DedupResult",
    "DocumentUploader",
    "GeminiStoreClient",
    "PermanentError",
    "RateLimitError",
    "SyncProgressTracker",
    "TransientError",
    "UploadLedger",
    "resolve_content_type",
]
