"""Sync orchestrator reconciling a source directory against a remote store.

Composes RemoteStoreDirectory, DocumentUploader and UploadLedger into one
run per logical store name:

- Resolve (or force-recreate) the canonical store
- Skip all upload work when the store is already populated (cache hit)
- Diff the source directory against the ledger
- Upload sequentially; a failing file is recorded and the batch continues
- Report the store's final document count against the target size

Only one run per logical name executes at a time; further callers queue
in arrival order on a :class:`KeyedFifoLock` owned by the orchestrator.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import AsyncIterator, Callable, Sequence
from pathlib import Path
from typing import Any

from ragsync.exceptions import LedgerIOError, StoreNotFoundError
from ragsync.models import (
    Document,
    FailedUpload,
    RemoteStore,
    SyncOptions,
    SyncProgressEvent,
    SyncResult,
    SyncStatus,
)
from ragsync.sync.differ import compute_upload_set, discover_documents
from ragsync.sync.fsm import SyncRunSM, create_run_fsm
from ragsync.sync.locks import KeyedFifoLock
from ragsync.sync.stores import RemoteStoreDirectory
from ragsync.upload.content_types import resolve_content_type
from ragsync.upload.ledger import UploadLedger
from ragsync.upload.uploader import DocumentUploader

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[SyncProgressEvent], Any]


class SyncOrchestrator:
    """Coordinates resolve, diff, upload and completion for one logical store.

    Usage::

        orchestrator = SyncOrchestrator(directory, uploader, ledger, target_count=607)
        result = await orchestrator.sync("national-security-documents-store", "documents")

    Args:
        directory: Display-name view over the remote stores.
        uploader: Single-document uploader used for every file.
        ledger: Shared upload ledger.
        target_count: Expected corpus size, for completeness reporting only.
        lock: Per-name lock; a fresh one is created when omitted.
    """

    def __init__(
        self,
        directory: RemoteStoreDirectory,
        uploader: DocumentUploader,
        ledger: UploadLedger,
        target_count: int | None = None,
        lock: KeyedFifoLock | None = None,
    ) -> None:
        self.directory = directory
        self.uploader = uploader
        self.ledger = ledger
        self.target_count = target_count
        self._lock = lock or KeyedFifoLock()

    # ------------------------------------------------------------------
    # Sync
    # ------------------------------------------------------------------

    async def sync(
        self,
        logical_name: str,
        directory_path: Path | str,
        options: SyncOptions | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> SyncResult:
        """Reconcile *directory_path* into the store named *logical_name*.

        Returns only after every planned file has been attempted. Per-file
        failures are reported in ``SyncResult.failed``; setup failures
        (source missing, store cannot be resolved) propagate.
        """
        options = options or SyncOptions()
        if self._lock.locked(logical_name):
            logger.info("Sync for %r already running, waiting in queue", logical_name)
        async with self._lock.hold(logical_name):
            fsm = create_run_fsm()
            try:
                return await self._run(fsm, logical_name, Path(directory_path), options, on_progress)
            except Exception:
                if fsm.current_state.value not in ("idle", "complete", "failed"):
                    fsm.fail()
                    await _emit(
                        on_progress,
                        SyncProgressEvent(kind="phase", phase="failed", message="Sync failed"),
                    )
                raise

    async def _run(
        self,
        fsm: SyncRunSM,
        name: str,
        directory_path: Path,
        options: SyncOptions,
        on_progress: ProgressCallback | None,
    ) -> SyncResult:
        fsm.begin()
        await self._phase(fsm, on_progress, f"Resolving store {name}")
        store, is_new = await self._resolve_store(name, options.force_reload)

        result = SyncResult(
            store_id=store.store_id,
            is_new=is_new,
            resume_mode=options.resume_mode,
            target_count=self.target_count,
        )

        if not (is_new or options.force_reload or options.resume_mode):
            fsm.use_cache()
            logger.info(
                "Using existing store %s with %d documents (no upload requested)",
                store.store_id,
                store.active_document_count,
            )
            await self._phase(fsm, on_progress, "Using cached store")
            result.cached = True
            result.document_count = store.active_document_count
            return await self._complete(fsm, result, on_progress)

        fsm.plan()
        await self._phase(fsm, on_progress, f"Scanning {directory_path}")
        documents = await asyncio.to_thread(
            discover_documents, directory_path, recursive=options.recursive
        )
        uploaded: set[str] = set()
        if options.resume_mode:
            uploaded = await self.ledger.list_uploaded(store.store_id)
        plan = compute_upload_set(documents, uploaded, resume=options.resume_mode)
        result.skipped_duplicates = list(plan.skipped_duplicate_filenames)
        result.skipped_already_uploaded = list(plan.skipped_already_uploaded)

        fsm.drive()
        total = len(plan.to_upload)
        await self._phase(fsm, on_progress, f"Uploading {total} documents", total=total)

        handled: set[str] = set()
        delay = self.uploader.config.inter_file_delay_seconds
        for index, document in enumerate(plan.to_upload, start=1):
            if document.file_name in handled:
                logger.info("Skipping %s (already handled this run)", document.file_name)
                result.skipped_in_session.append(document.file_name)
                continue
            if index > 1:
                await self.uploader.pause(delay)
            logger.info("Uploading %d/%d: %s", index, total, document.file_name)
            ok = await self._upload_one(self.uploader, store.store_id, document, result)
            if ok:
                handled.add(document.file_name)
            await _emit(
                on_progress,
                SyncProgressEvent(
                    kind="file",
                    message=f"{'Uploaded' if ok else 'Failed'} {document.file_name}",
                    current=index,
                    total=total,
                    file_name=document.file_name,
                    phase=fsm.current_state.value,
                    succeeded=ok,
                ),
            )

        logger.info(
            "Upload complete: %d succeeded, %d failed, %d skipped",
            len(result.successful),
            len(result.failed),
            len(result.skipped),
        )
        result.document_count = await self._refresh_count(store)
        return await self._complete(fsm, result, on_progress)

    async def _resolve_store(self, name: str, force_reload: bool) -> tuple[RemoteStore, bool]:
        if force_reload:
            # Every store sharing the name goes, canonical first, so the
            # following create cannot fall back to a leftover duplicate.
            matches = await self.directory.find_by_display_name(name)
            matches.sort(key=lambda s: s.active_document_count, reverse=True)
            for existing in matches:
                logger.info(
                    "Force reload: deleting existing store %s (%d documents)",
                    existing.store_id,
                    existing.active_document_count,
                )
                await self.directory.delete(existing.store_id)
            store, _ = await self.directory.get_or_create(name)
            return store, True
        return await self.directory.get_or_create(name)

    async def _complete(
        self,
        fsm: SyncRunSM,
        result: SyncResult,
        on_progress: ProgressCallback | None,
    ) -> SyncResult:
        fsm.finish()
        if self.target_count:
            logger.info(
                "Store %s holds %d of %d expected documents",
                result.store_id,
                result.document_count,
                self.target_count,
            )
        await _emit(
            on_progress,
            SyncProgressEvent(
                kind="complete",
                message="Sync complete",
                current=len(result.successful),
                total=len(result.successful) + len(result.failed),
                phase=fsm.current_state.value,
                result=result,
            ),
        )
        return result

    async def _phase(
        self,
        fsm: SyncRunSM,
        on_progress: ProgressCallback | None,
        message: str,
        total: int = 0,
    ) -> None:
        await _emit(
            on_progress,
            SyncProgressEvent(
                kind="phase", message=message, total=total, phase=fsm.current_state.value
            ),
        )

    async def _upload_one(
        self,
        uploader: DocumentUploader,
        store_id: str,
        document: Document,
        result: SyncResult,
    ) -> bool:
        """Upload one document and record the outcome on *result*."""
        try:
            attempts = await uploader.upload(store_id, document)
        except Exception as exc:
            logger.error("Failed to upload %s: %s", document.file_name, exc)
            result.failed.append(FailedUpload(document.file_name, str(exc)))
            return False

        try:
            await self.ledger.record_success(store_id, document.file_name)
        except LedgerIOError as exc:
            logger.error(
                "Uploaded %s but could not record it in the ledger (%s); "
                "it will be re-uploaded on the next resume run",
                document.file_name,
                exc,
            )
        logger.info("Uploaded %s (%d attempt(s))", document.file_name, attempts)
        result.successful.append(document.file_name)
        return True

    async def _refresh_count(self, store: RemoteStore) -> int:
        try:
            current = await self.directory.get(store.store_id)
        except Exception as exc:
            logger.warning("Could not refresh document count for %s: %s", store.store_id, exc)
            return store.active_document_count
        return current.active_document_count if current else store.active_document_count

    # ------------------------------------------------------------------
    # Streaming
    # ------------------------------------------------------------------

    async def stream(
        self,
        logical_name: str,
        directory_path: Path | str,
        options: SyncOptions | None = None,
    ) -> AsyncIterator[SyncProgressEvent]:
        """Run :meth:`sync` and yield its progress events as they happen.

        The last event is the ``"complete"`` event carrying the result. A
        setup failure is re-raised after the events emitted before it.
        """
        queue: asyncio.Queue[SyncProgressEvent | None] = asyncio.Queue()
        task = asyncio.create_task(
            self.sync(logical_name, directory_path, options, on_progress=queue.put)
        )
        task.add_done_callback(lambda _: queue.put_nowait(None))
        try:
            while True:
                event = await queue.get()
                if event is None:
                    break
                yield event
            task.result()
        finally:
            if not task.done():
                task.cancel()

    # ------------------------------------------------------------------
    # Status and targeted retry
    # ------------------------------------------------------------------

    async def get_status(self, logical_name: str) -> SyncStatus:
        """Completeness view of *logical_name*. Never creates a store."""
        store = await self.directory.resolve_canonical(logical_name)
        if store is None:
            return SyncStatus(
                display_name=logical_name,
                store_id=None,
                remote_document_count=0,
                ledger_document_count=0,
                unique_ledger_count=0,
                target_count=self.target_count,
            )
        raw = await asyncio.to_thread(self.ledger.entries, store.store_id)
        return SyncStatus(
            display_name=logical_name,
            store_id=store.store_id,
            remote_document_count=store.active_document_count,
            ledger_document_count=len(raw),
            unique_ledger_count=len(set(raw)),
            target_count=self.target_count,
            size_bytes=store.size_bytes,
        )

    async def retry_files(
        self,
        logical_name: str,
        directory_path: Path | str,
        file_names: Sequence[str],
        uploader: DocumentUploader | None = None,
        inter_file_delay: float = 0.0,
        on_progress: ProgressCallback | None = None,
    ) -> SyncResult:
        """Upload an explicit list of files into the existing store.

        Intended for documents that stalled during a normal run, usually
        with a patient uploader (see :meth:`UploadConfig.patient`) and a
        long *inter_file_delay*.

        Raises:
            StoreNotFoundError: If no store exists for *logical_name*.
        """
        uploader = uploader or self.uploader
        root = Path(directory_path)
        async with self._lock.hold(logical_name):
            store = await self.directory.resolve_canonical(logical_name)
            if store is None:
                raise StoreNotFoundError(f"No store found with display name {logical_name!r}")

            uploaded = await self.ledger.list_uploaded(store.store_id)
            result = SyncResult(
                store_id=store.store_id, resume_mode=True, target_count=self.target_count
            )
            total = len(file_names)
            attempted = 0
            for index, relative in enumerate(file_names, start=1):
                # ledger and remote display names are keyed by basename, as in sync
                name = Path(relative).name
                if name in uploaded:
                    logger.info("Skipping %s (already in ledger)", name)
                    result.skipped_already_uploaded.append(name)
                    continue

                path = root / relative
                if not await asyncio.to_thread(path.is_file):
                    logger.error("File not found: %s", path)
                    result.failed.append(FailedUpload(name, "File not found"))
                    ok = False
                else:
                    if attempted:
                        logger.info("Waiting %.0fs before next file", inter_file_delay)
                        await uploader.pause(inter_file_delay)
                    attempted += 1
                    document = Document(
                        file_name=name,
                        path=path,
                        size_bytes=(await asyncio.to_thread(path.stat)).st_size,
                        content_type=resolve_content_type(path),
                    )
                    logger.info("Retrying %d/%d: %s", index, total, name)
                    ok = await self._upload_one(uploader, store.store_id, document, result)
                    if ok:
                        uploaded.add(name)

                await _emit(
                    on_progress,
                    SyncProgressEvent(
                        kind="file",
                        message=f"{'Uploaded' if ok else 'Failed'} {name}",
                        current=index,
                        total=total,
                        file_name=name,
                        phase="uploading",
                        succeeded=ok,
                    ),
                )

            result.document_count = await self._refresh_count(store)
            logger.info(
                "Retry complete: %d succeeded, %d failed, %d skipped",
                len(result.successful),
                len(result.failed),
                len(result.skipped),
            )
            return result


async def _emit(callback: ProgressCallback | None, event: SyncProgressEvent) -> None:
    if callback is None:
        return
    outcome = callback(event)
    if inspect.isawaitable(outcome):
        await outcome
