"""Data models for the corpus sync engine."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

# Keys the store listing has been observed to use for its item sequence.
_LISTING_KEYS = ("fileSearchStores", "file_search_stores", "pageInternal", "page_internal")


def _int_or_zero(value: Any) -> int:
    """Coerce a count that may arrive as ``None``, ``str`` or ``int``."""
    if value is None or value == "":
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _field(raw: Any, *names: str) -> Any:
    """Return the first present attribute or key among *names*."""
    for name in names:
        if isinstance(raw, Mapping):
            if raw.get(name) is not None:
                return raw[name]
        else:
            value = getattr(raw, name, None)
            if value is not None:
                return value
    return None


@dataclass(slots=True)
class Document:
    """A source file to be ingested. Never mutated after discovery."""

    file_name: str
    path: Path
    size_bytes: int
    content_type: str


@dataclass(slots=True)
class RemoteStore:
    """A named remote ingestion target.

    ``display_name`` is not unique on the remote side; see
    :meth:`ragsync.sync.stores.RemoteStoreDirectory.resolve_canonical`.
    """

    store_id: str
    display_name: str | None = None
    active_document_count: int = 0
    size_bytes: int = 0
    create_time: str | None = None
    update_time: str | None = None

    @classmethod
    def from_api(cls, raw: Any) -> RemoteStore:
        """Build a store from an SDK object or a raw camelCase mapping."""
        store_id = _field(raw, "name", "store_id")
        if not store_id:
            raise ValueError(f"Store listing item has no name: {raw!r}")
        create_time = _field(raw, "create_time", "createTime")
        update_time = _field(raw, "update_time", "updateTime")
        return cls(
            store_id=str(store_id),
            display_name=_field(raw, "display_name", "displayName"),
            active_document_count=_int_or_zero(
                _field(raw, "active_documents_count", "activeDocumentsCount")
            ),
            size_bytes=_int_or_zero(_field(raw, "size_bytes", "sizeBytes")),
            create_time=str(create_time) if create_time is not None else None,
            update_time=str(update_time) if update_time is not None else None,
        )

    def to_dict(self) -> dict[str, object]:
        return asdict(self)


def normalize_store_listing(payload: Any) -> list[RemoteStore]:
    """Normalize any observed store-listing shape into :class:`RemoteStore` items.

    Accepts a plain sequence of items, or a mapping/object that carries the
    sequence under one of the known listing keys.
    """
    if payload is None:
        return []
    items: Any = None
    if isinstance(payload, Mapping):
        for key in _LISTING_KEYS:
            if payload.get(key) is not None:
                items = payload[key]
                break
        if items is None:
            items = []
    elif isinstance(payload, (list, tuple)):
        items = payload
    else:
        for key in _LISTING_KEYS:
            value = getattr(payload, key, None)
            if value is not None:
                items = value
                break
        if items is None:
            items = list(payload)
    return [RemoteStore.from_api(item) for item in items]


@dataclass
class LedgerEntry:
    """Local record of the files durably ingested into one store."""

    store_id: str
    uploaded_files: list[str] = field(default_factory=list)
    last_update: str | None = None


@dataclass(slots=True)
class UploadPlan:
    """Output of the corpus differ."""

    to_upload: list[Document] = field(default_factory=list)
    skipped_duplicate_filenames: list[str] = field(default_factory=list)
    skipped_already_uploaded: list[str] = field(default_factory=list)

    @property
    def summary(self) -> str:
        return (
            f"to_upload={len(self.to_upload)}, "
            f"duplicates={len(self.skipped_duplicate_filenames)}, "
            f"already_uploaded={len(self.skipped_already_uploaded)}"
        )


@dataclass(slots=True)
class FailedUpload:
    """One file that could not be ingested during a run."""

    file_name: str
    error: str


@dataclass
class SyncOptions:
    """Per-run switches for :meth:`SyncOrchestrator.sync`."""

    force_reload: bool = False
    resume_mode: bool = False
    recursive: bool = False


@dataclass
class SyncResult:
    """Aggregate of one sync run. Returned to the caller, never persisted."""

    store_id: str
    successful: list[str] = field(default_factory=list)
    failed: list[FailedUpload] = field(default_factory=list)
    skipped_duplicates: list[str] = field(default_factory=list)
    skipped_already_uploaded: list[str] = field(default_factory=list)
    skipped_in_session: list[str] = field(default_factory=list)
    is_new: bool = False
    cached: bool = False
    resume_mode: bool = False
    document_count: int = 0
    target_count: int | None = None

    @property
    def skipped(self) -> list[str]:
        """Duplicates, already-uploaded and in-session repeats, in that order."""
        return [
            *self.skipped_duplicates,
            *self.skipped_already_uploaded,
            *self.skipped_in_session,
        ]

    def to_dict(self) -> dict[str, object]:
        d = asdict(self)
        d["skipped"] = self.skipped
        return d


@dataclass(slots=True)
class SyncProgressEvent:
    """Progress notification emitted during a sync run.

    ``kind`` is ``"phase"``, ``"file"`` or ``"complete"``.
    """

    kind: str
    message: str = ""
    current: int = 0
    total: int = 0
    file_name: str | None = None
    phase: str | None = None
    succeeded: bool | None = None
    result: Optional[SyncResult] = None


@dataclass
class SyncStatus:
    """Read-only completeness view of a logical store."""

    display_name: str
    store_id: str | None
    remote_document_count: int
    ledger_document_count: int
    unique_ledger_count: int
    target_count: int | None
    size_bytes: int = 0

    @property
    def ledger_duplicate_count(self) -> int:
        return self.ledger_document_count - self.unique_ledger_count

    @property
    def has_ledger_duplicates(self) -> bool:
        return self.ledger_duplicate_count > 0

    @property
    def percent_complete(self) -> int | None:
        if not self.target_count:
            return None
        return round(self.unique_ledger_count / self.target_count * 100)

    @property
    def is_complete(self) -> bool:
        return bool(self.target_count) and self.unique_ledger_count >= self.target_count


@dataclass
class GroundingReference:
    """One retrieved passage backing a query answer."""

    source_text: str | None
    source_uri: str | None
    source_title: str | None
    file_name: str | None = None


@dataclass
class QueryAnswer:
    """Answer text plus its grounding references."""

    answer_text: str
    references: list[GroundingReference] = field(default_factory=list)


@dataclass
class UploadConfig:
    """Retry, backoff and polling bounds for the uploader.

    The bounds are empirical: stalled ingestion of specific documents has
    forced them upward before, so they are configuration, not constants.
    """

    max_retries: int = 5
    backoff_base_seconds: float = 2.0
    poll_interval_seconds: float = 3.0
    max_poll_attempts: int = 120
    post_success_delay_seconds: float = 1.5
    inter_file_delay_seconds: float = 0.0
    progress_log_every: int = 20

    @classmethod
    def patient(cls) -> UploadConfig:
        """Slow profile for re-trying documents that stalled in a normal run."""
        return cls(
            max_retries=3,
            backoff_base_seconds=15.0,
            max_poll_attempts=200,
            inter_file_delay_seconds=120.0,
        )

    @property
    def max_poll_seconds(self) -> float:
        return self.max_poll_attempts * self.poll_interval_seconds


@dataclass
class SyncConfig:
    """Configuration surface consumed by the sync engine and CLI."""

    documents_dir: Path = field(default_factory=lambda: Path("documents"))
    store_name: str = "national-security-documents-store"
    ledger_path: Path = field(default_factory=lambda: Path("data/upload_ledger.json"))
    target_count: int | None = 607
    model: str = "gemini-2.5-flash"
    recursive: bool = False
    upload: UploadConfig = field(default_factory=UploadConfig)

    def __post_init__(self) -> None:
        """Ensure paths are Path objects."""
        if isinstance(self.documents_dir, str):
            self.documents_dir = Path(self.documents_dir)
        if isinstance(self.ledger_path, str):
            self.ledger_path = Path(self.ledger_path)


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()
