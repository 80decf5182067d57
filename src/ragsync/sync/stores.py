"""Remote store directory: list, resolve, create and delete stores by display name.

The remote API does not enforce unique display names, and store creation
is not idempotent: two concurrent "create if absent" calls can both see
nothing and both create. Duplicate display names are therefore an
expected, recoverable condition. Every resolution picks one canonical
store, the one with the greatest active document count (first listed
wins a tie), and :meth:`RemoteStoreDirectory.get_or_create` deletes the
others as a side effect.

Greatest-document-count is a proxy for "most recently fully uploaded",
not a recency guarantee: after a partial reload the intended store can
hold fewer documents. It is the documented default and nothing more.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from ragsync.models import RemoteStore
from ragsync.upload.ledger import UploadLedger

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    """Outcome of collapsing the stores that share one display name."""

    found: int
    kept: str | None
    deleted_ids: list[str] = field(default_factory=list)
    failed_ids: list[str] = field(default_factory=list)

    @property
    def deleted_count(self) -> int:
        return len(self.deleted_ids)


def select_canonical(stores: Sequence[RemoteStore]) -> RemoteStore | None:
    """Pick the store with the most active documents; first encountered wins ties."""
    if not stores:
        return None
    return _canonical(stores)


def _canonical(stores: Sequence[RemoteStore]) -> RemoteStore:
    return max(stores, key=lambda s: s.active_document_count)


class RemoteStoreDirectory:
    """Display-name view over the remote store API.

    Deleting a store through this directory also clears its ledger entry.

    Args:
        client: Remote store client (see :mod:`ragsync.upload.client`).
        ledger: Upload ledger shared with the rest of the process.
    """

    def __init__(self, client: Any, ledger: UploadLedger) -> None:
        self._client = client
        self._ledger = ledger

    async def list_stores(self) -> list[RemoteStore]:
        return await self._client.list_stores()

    async def get(self, store_id: str) -> RemoteStore | None:
        """Return the current listing entry for *store_id*, if any."""
        for store in await self.list_stores():
            if store.store_id == store_id:
                return store
        return None

    async def find_by_display_name(self, name: str) -> list[RemoteStore]:
        return [s for s in await self.list_stores() if s.display_name == name]

    async def resolve_canonical(self, name: str) -> RemoteStore | None:
        """Return "the" store for *name* without modifying anything."""
        matches = await self.find_by_display_name(name)
        store = select_canonical(matches)
        if store is None:
            logger.info("No store found for display name %r", name)
        else:
            logger.info(
                "Found %d store(s) for %r, using %s (%d documents)",
                len(matches),
                name,
                store.store_id,
                store.active_document_count,
            )
        return store

    async def get_or_create(self, name: str) -> tuple[RemoteStore, bool]:
        """Return the canonical store for *name*, creating it when absent.

        When several stores share *name*, the non-canonical ones are deleted
        before returning, so each call leaves at most one store per name.

        Returns:
            ``(store, is_new)``.
        """
        matches = await self.find_by_display_name(name)
        if not matches:
            logger.info("Creating new store %r", name)
            store = await self._client.create_store(name)
            return store, True

        if len(matches) == 1:
            logger.info("Found existing store %s (%s)", matches[0].store_id, name)
            return matches[0], False

        logger.warning(
            "Found %d stores with display name %r - cleaning up duplicates",
            len(matches),
            name,
        )
        result = await self._collapse(matches)
        keep = next(s for s in matches if s.store_id == result.kept)
        return keep, False

    async def delete(self, store_id: str) -> None:
        """Force-delete a remote store and clear its ledger entry."""
        await self._client.delete_store(store_id, force=True)
        await self._ledger.clear(store_id)

    async def reconcile_duplicates(self, name: str) -> ReconcileResult:
        """Collapse the stores sharing *name* down to the canonical one.

        Same selection rule as :meth:`get_or_create`; never creates a store.
        """
        matches = await self.find_by_display_name(name)
        if len(matches) <= 1:
            logger.info("No duplicate stores found for %r", name)
            return ReconcileResult(
                found=len(matches),
                kept=matches[0].store_id if matches else None,
            )
        logger.info("Found %d stores with display name %r - reconciling", len(matches), name)
        return await self._collapse(matches)

    async def _collapse(self, matches: list[RemoteStore]) -> ReconcileResult:
        keep = _canonical(matches)
        logger.info("Keeping %s (%d documents)", keep.store_id, keep.active_document_count)

        result = ReconcileResult(found=len(matches), kept=keep.store_id)
        for store in matches:
            if store.store_id == keep.store_id:
                continue
            logger.info(
                "Deleting duplicate %s (%d documents)",
                store.store_id,
                store.active_document_count,
            )
            try:
                await self.delete(store.store_id)
            except Exception as exc:
                logger.error("Failed to delete duplicate %s: %s", store.store_id, exc)
                result.failed_ids.append(store.store_id)
            else:
                result.deleted_ids.append(store.store_id)

        logger.info(
            "Cleanup complete. Kept %s, deleted %d, failed %d",
            keep.store_id,
            result.deleted_count,
            len(result.failed_ids),
        )
        return result
