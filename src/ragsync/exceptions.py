"""Error taxonomy for the corpus sync engine.

Per-file failures (:class:`UploadFailedError`) are converted to data by the
orchestrator. Setup failures (:class:`SourceNotFoundError`,
:class:`StoreNotFoundError`) propagate to the caller and end the run.
"""

from __future__ import annotations


class RagSyncError(Exception):
    """Base class for all ragsync errors."""


class SourceNotFoundError(RagSyncError):
    """Source directory is missing, unreadable, or holds no supported documents."""


class StoreNotFoundError(RagSyncError):
    """No remote store exists for the requested display name."""


class LedgerIOError(RagSyncError):
    """Reading or writing the upload ledger failed at the filesystem level."""


class UploadTimeoutError(RagSyncError):
    """Polling an ingestion operation exceeded the configured bound."""

    def __init__(self, file_name: str, elapsed_seconds: float) -> None:
        self.file_name = file_name
        self.elapsed_seconds = elapsed_seconds
        super().__init__(
            f"Upload timeout for {file_name} after {elapsed_seconds:.0f} seconds"
        )


class UploadFailedError(RagSyncError):
    """All upload attempts for one document were exhausted."""

    def __init__(
        self, file_name: str, last_error: BaseException | None, attempts_used: int
    ) -> None:
        self.file_name = file_name
        self.last_error = last_error
        self.attempts_used = attempts_used
        super().__init__(
            f"Failed to upload {file_name} after {attempts_used} attempts: {last_error}"
        )
