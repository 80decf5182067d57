"""Shared pytest fixtures for the corpus sync engine tests.

Provides an in-memory remote store service, a recording sleep, a
temporary ledger and a small documents directory. No test touches the
network or waits on a real clock.
"""

from __future__ import annotations

import dataclasses
import itertools
from pathlib import Path

import pytest

from ragsync.models import RemoteStore, UploadConfig
from ragsync.sync.orchestrator import SyncOrchestrator
from ragsync.sync.stores import RemoteStoreDirectory
from ragsync.upload.client import PermanentError, TransientError
from ragsync.upload.ledger import UploadLedger
from ragsync.upload.uploader import DocumentUploader


@dataclasses.dataclass
class FakeOperation:
    """Long-running ingestion operation as returned by the fake remote."""

    name: str
    store_id: str
    file_name: str
    polls_left: int
    done: bool = False
    error: object = None


class FakeRemote:
    """In-memory stand-in for :class:`ragsync.upload.client.GeminiStoreClient`.

    Knobs:
        fail_files: file name -> number of submits that raise (-1 = always).
        stall_files: file names whose operations never complete.
        error_files: file names whose operations complete with an error.
        polls_to_finish: polls needed before an operation reports done.
        fail_delete: store ids whose deletion raises.
    """

    def __init__(self) -> None:
        self.stores: list[RemoteStore] = []
        self.documents: dict[str, list[str]] = {}
        self.submissions: list[tuple[str, str, str]] = []
        self.created: list[str] = []
        self.deleted: list[str] = []
        self.fail_files: dict[str, int] = {}
        self.stall_files: set[str] = set()
        self.error_files: set[str] = set()
        self.fail_delete: set[str] = set()
        self.polls_to_finish = 0
        self._ids = itertools.count(1)

    def add_store(self, display_name: str, document_count: int = 0) -> RemoteStore:
        store_id = f"fileSearchStores/store-{next(self._ids)}"
        store = RemoteStore(
            store_id=store_id,
            display_name=display_name,
            active_document_count=document_count,
            size_bytes=document_count * 1024,
            create_time="2026-01-01T00:00:00Z",
        )
        self.stores.append(store)
        self.documents[store_id] = [f"existing-{i}.txt" for i in range(document_count)]
        return store

    # Remote API ----------------------------------------------------------

    async def create_store(self, display_name: str) -> RemoteStore:
        store = self.add_store(display_name)
        self.created.append(store.store_id)
        return dataclasses.replace(store)

    async def list_stores(self) -> list[RemoteStore]:
        return [dataclasses.replace(s) for s in self.stores]

    async def delete_store(self, store_id: str, force: bool = True) -> None:
        if store_id in self.fail_delete:
            raise PermanentError(f"403: cannot delete {store_id}")
        self.stores = [s for s in self.stores if s.store_id != store_id]
        self.documents.pop(store_id, None)
        self.deleted.append(store_id)

    async def submit_document(
        self, store_id: str, data: bytes, file_name: str, content_type: str
    ) -> FakeOperation:
        self.submissions.append((store_id, file_name, content_type))
        remaining = self.fail_files.get(file_name, 0)
        if remaining:
            if remaining > 0:
                self.fail_files[file_name] = remaining - 1
            raise TransientError(f"503: upload of {file_name} failed")
        op = FakeOperation(
            name=f"operations/{len(self.submissions)}",
            store_id=store_id,
            file_name=file_name,
            polls_left=self.polls_to_finish,
        )
        if op.polls_left == 0 and file_name not in self.stall_files:
            self._finish(op)
        return op

    async def poll_operation(self, operation: FakeOperation) -> FakeOperation:
        if operation.file_name in self.stall_files:
            return operation
        operation.polls_left -= 1
        if operation.polls_left <= 0:
            self._finish(operation)
        return operation

    def _finish(self, op: FakeOperation) -> None:
        op.done = True
        if op.file_name in self.error_files:
            op.error = {"code": 13, "message": "internal"}
            return
        self.documents.setdefault(op.store_id, []).append(op.file_name)
        for store in self.stores:
            if store.store_id == op.store_id:
                store.active_document_count += 1

    def names(self) -> list[str]:
        return [s.display_name for s in self.stores]


@pytest.fixture
def remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture
def sleeps() -> list[float]:
    """Every delay requested through the fake sleep, in order."""
    return []


@pytest.fixture
def fake_sleep(sleeps: list[float]):
    async def _sleep(seconds: float) -> None:
        sleeps.append(seconds)

    return _sleep


@pytest.fixture
def ledger(tmp_path: Path) -> UploadLedger:
    return UploadLedger(tmp_path / "data" / "upload_ledger.json")


@pytest.fixture
def directory(remote: FakeRemote, ledger: UploadLedger) -> RemoteStoreDirectory:
    return RemoteStoreDirectory(remote, ledger)


@pytest.fixture
def upload_config() -> UploadConfig:
    return UploadConfig()


@pytest.fixture
def uploader(remote: FakeRemote, upload_config: UploadConfig, fake_sleep) -> DocumentUploader:
    return DocumentUploader(remote, upload_config, sleep=fake_sleep)


@pytest.fixture
def orchestrator(
    directory: RemoteStoreDirectory,
    uploader: DocumentUploader,
    ledger: UploadLedger,
) -> SyncOrchestrator:
    return SyncOrchestrator(directory, uploader, ledger, target_count=607)


@pytest.fixture
def docs_dir(tmp_path: Path) -> Path:
    """Documents directory with four supported files and one ignored file.

    Structure:
        docs/
          001 Alpha Strategy 2020.txt
          002 Beta Review.pdf
          003 Gamma White Paper.md
          004 Delta Doctrine.docx
          notes.xyz              (unsupported, ignored)
    """
    root = tmp_path / "docs"
    root.mkdir()
    content = "National security strategy text. " * 40
    (root / "001 Alpha Strategy 2020.txt").write_text(content)
    (root / "002 Beta Review.pdf").write_bytes(b"%PDF-1.4 fake")
    (root / "003 Gamma White Paper.md").write_text("# Gamma\n" + content)
    (root / "004 Delta Doctrine.docx").write_bytes(b"PK\x03\x04fake docx")
    (root / "notes.xyz").write_text("ignored")
    return root


@pytest.fixture
def doc_names() -> list[str]:
    """Names of the supported files in docs_dir, in sorted order."""
    return [
        "001 Alpha Strategy 2020.txt",
        "002 Beta Review.pdf",
        "003 Gamma White Paper.md",
        "004 Delta Doctrine.docx",
    ]
