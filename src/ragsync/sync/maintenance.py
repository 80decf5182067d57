"""Operator maintenance: inspection, ledger repair and store reconciliation.

These run independently of a sync. The mutating helpers go through the
same RemoteStoreDirectory and UploadLedger the orchestrator uses, so a
deleted store always loses its ledger entry too.
"""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field

from ragsync.models import RemoteStore
from ragsync.sync.stores import ReconcileResult, RemoteStoreDirectory
from ragsync.upload.ledger import DedupResult, UploadLedger

logger = logging.getLogger(__name__)


@dataclass
class StoreInventory:
    """All visible stores, grouped by display name."""

    stores: list[RemoteStore] = field(default_factory=list)
    grouped_by_display_name: dict[str, list[RemoteStore]] = field(default_factory=dict)

    @property
    def duplicate_display_names(self) -> list[str]:
        return sorted(n for n, group in self.grouped_by_display_name.items() if len(group) > 1)

    @property
    def total_documents(self) -> int:
        return sum(s.active_document_count for s in self.stores)


@dataclass
class LedgerAnalysis:
    """Duplicate analysis of one ledger entry."""

    total_entries: int
    unique_files: int
    duplicate_files: dict[str, int] = field(default_factory=dict)
    last_update: str | None = None

    @property
    def duplicate_count(self) -> int:
        return self.total_entries - self.unique_files


@dataclass
class LedgerVerification:
    """Full listing of one store's ledger entry."""

    store_id: str
    total_entries: int
    unique_files: int
    duplicate_files: dict[str, int] = field(default_factory=dict)
    file_names: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.duplicate_files


def _duplicates(names: Iterable[str]) -> dict[str, int]:
    return {name: n for name, n in Counter(names).items() if n > 1}


async def inspect_stores(directory: RemoteStoreDirectory) -> StoreInventory:
    """List every store and flag display names held by more than one."""
    stores = await directory.list_stores()
    inventory = StoreInventory(stores=stores)
    for store in stores:
        key = store.display_name or "(unnamed)"
        inventory.grouped_by_display_name.setdefault(key, []).append(store)
    for name in inventory.duplicate_display_names:
        logger.warning(
            "%d stores share display name %r",
            len(inventory.grouped_by_display_name[name]),
            name,
        )
    return inventory


async def inspect_ledger(ledger: UploadLedger) -> dict[str, LedgerAnalysis]:
    """Per-store duplicate analysis of the ledger. Read-only."""
    entries = await asyncio.to_thread(ledger.load)
    report: dict[str, LedgerAnalysis] = {}
    for store_id, entry in entries.items():
        report[store_id] = LedgerAnalysis(
            total_entries=len(entry.uploaded_files),
            unique_files=len(set(entry.uploaded_files)),
            duplicate_files=_duplicates(entry.uploaded_files),
            last_update=entry.last_update,
        )
    return report


async def verify_ledger(ledger: UploadLedger, store_id: str) -> LedgerVerification:
    """Report the ledger contents for *store_id*. Read-only."""
    raw = await asyncio.to_thread(ledger.entries, store_id)
    return LedgerVerification(
        store_id=store_id,
        total_entries=len(raw),
        unique_files=len(set(raw)),
        duplicate_files=_duplicates(raw),
        file_names=sorted(set(raw)),
    )


async def deduplicate_ledger(
    ledger: UploadLedger,
    store_ids: Iterable[str] | None = None,
) -> dict[str, DedupResult]:
    """Collapse duplicate ledger entries, for every store when *store_ids* is None."""
    if store_ids is None:
        store_ids = await asyncio.to_thread(ledger.store_ids)
    results: dict[str, DedupResult] = {}
    for store_id in store_ids:
        results[store_id] = await ledger.deduplicate(store_id)
    return results


async def reconcile_stores(directory: RemoteStoreDirectory, name: str) -> ReconcileResult:
    """Collapse the stores sharing *name* down to the canonical one."""
    return await directory.reconcile_duplicates(name)


async def purge_all_stores(directory: RemoteStoreDirectory) -> tuple[list[str], list[str]]:
    """Delete every visible store.

    Returns:
        ``(deleted_ids, failed_ids)``. A failed delete is logged and
        reported, not raised.
    """
    stores = await directory.list_stores()
    logger.warning("Deleting all %d stores", len(stores))
    deleted: list[str] = []
    failed: list[str] = []
    for store in stores:
        try:
            await directory.delete(store.store_id)
        except Exception as exc:
            logger.error("Failed to delete %s: %s", store.store_id, exc)
            failed.append(store.store_id)
        else:
            logger.info("Deleted %s (%s)", store.store_id, store.display_name)
            deleted.append(store.store_id)
    return deleted, failed
