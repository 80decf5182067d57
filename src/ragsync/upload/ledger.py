"""Durable local ledger of documents ingested into each remote store.

The remote API offers no way to list ingested documents by name, so this
ledger is the sole source of truth for "what's already uploaded".

State is a single JSON document written atomically (write to ``.tmp``
then rename), so a crash mid-write never leaves a partial ledger::

    {
      "fileSearchStores/abc123": {
        "uploaded_files": ["001 Report.txt", "002 Review.pdf"],
        "last_update": "2026-10-18T09:12:44.512311+00:00"
      }
    }

Every read-modify-write runs under one ``asyncio.Lock`` per ledger
instance; share a single instance across a process.

A crash between a successful remote upload and :meth:`record_success`
leaves the file out of the ledger and it is uploaded again on the next
resume run (at-least-once). The remote side exposes no two-phase commit,
so this is accepted rather than prevented.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from pathlib import Path

from ragsync.exceptions import LedgerIOError
from ragsync.models import LedgerEntry, utc_now_iso

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DedupResult:
    """Counts reported by :meth:`UploadLedger.deduplicate`."""

    before: int
    after: int

    @property
    def removed(self) -> int:
        return self.before - self.after


class UploadLedger:
    """JSON-backed record of ``store_id -> uploaded file names``.

    Usage::

        ledger = UploadLedger(Path("data/upload_ledger.json"))
        await ledger.record_success("fileSearchStores/abc", "report.txt")
        done = await ledger.list_uploaded("fileSearchStores/abc")
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        """Return the ledger file path."""
        return self._path

    # ------------------------------------------------------------------
    # Raw persistence
    # ------------------------------------------------------------------

    def load(self) -> dict[str, LedgerEntry]:
        """Read the persisted ledger.

        Returns an empty mapping when the file is absent or its content
        cannot be decoded (logged, not fatal).

        Raises:
            LedgerIOError: If the file exists but cannot be read.
        """
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise LedgerIOError(f"Cannot read ledger {self._path}: {exc}") from exc

        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            logger.warning("Ledger %s is corrupt, starting empty: %s", self._path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ledger %s is not a JSON object, starting empty", self._path)
            return {}

        entries: dict[str, LedgerEntry] = {}
        for store_id, raw in data.items():
            if not isinstance(raw, dict):
                logger.warning("Ignoring malformed ledger entry for %s", store_id)
                continue
            files = raw.get("uploaded_files") or []
            entries[store_id] = LedgerEntry(
                store_id=store_id,
                uploaded_files=[str(f) for f in files],
                last_update=raw.get("last_update"),
            )
        return entries

    def save(self, entries: dict[str, LedgerEntry]) -> None:
        """Atomically replace the persisted ledger with *entries*.

        Raises:
            LedgerIOError: On any filesystem error.
        """
        payload = {
            store_id: {
                "uploaded_files": entry.uploaded_files,
                "last_update": entry.last_update,
            }
            for store_id, entry in entries.items()
        }
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
            tmp_path.replace(self._path)
        except OSError as exc:
            raise LedgerIOError(f"Cannot write ledger {self._path}: {exc}") from exc

    # ------------------------------------------------------------------
    # Serialized read-modify-write operations
    # ------------------------------------------------------------------

    async def record_success(self, store_id: str, file_name: str) -> bool:
        """Append *file_name* to the store's entry.

        Idempotent. A repeat call is a no-op logged as a warning, since it
        means some caller lost track of what it already uploaded.

        Returns:
            True if the file was added, False if it was already present.
        """
        async with self._lock:
            entries = await asyncio.to_thread(self.load)
            entry = entries.setdefault(store_id, LedgerEntry(store_id=store_id))
            if file_name in entry.uploaded_files:
                logger.warning(
                    "Attempted to record duplicate file %s (already in %s)",
                    file_name,
                    store_id,
                )
                return False
            entry.uploaded_files.append(file_name)
            entry.last_update = utc_now_iso()
            await asyncio.to_thread(self.save, entries)
            return True

    async def list_uploaded(self, store_id: str) -> set[str]:
        """Return the set of files recorded for *store_id*.

        Duplicate entries found on the way (legacy or hand-edited state) are
        collapsed and the corrected ledger is persisted before returning.
        """
        async with self._lock:
            entries = await asyncio.to_thread(self.load)
            entry = entries.get(store_id)
            if entry is None:
                return set()
            unique = list(dict.fromkeys(entry.uploaded_files))
            if len(unique) != len(entry.uploaded_files):
                logger.warning(
                    "Found %d duplicate(s) in ledger for %s - auto-fixing (%d -> %d)",
                    len(entry.uploaded_files) - len(unique),
                    store_id,
                    len(entry.uploaded_files),
                    len(unique),
                )
                entry.uploaded_files = unique
                entry.last_update = utc_now_iso()
                await asyncio.to_thread(self.save, entries)
            logger.info("Ledger holds %d unique documents for %s", len(unique), store_id)
            return set(unique)

    async def clear(self, store_id: str) -> None:
        """Remove the entry for *store_id* entirely."""
        async with self._lock:
            entries = await asyncio.to_thread(self.load)
            if entries.pop(store_id, None) is None:
                return
            await asyncio.to_thread(self.save, entries)
            logger.info("Cleared ledger entry for %s", store_id)

    async def deduplicate(self, store_id: str) -> DedupResult:
        """Collapse the store's entry to unique file names and persist it."""
        async with self._lock:
            entries = await asyncio.to_thread(self.load)
            entry = entries.get(store_id)
            if entry is None:
                return DedupResult(before=0, after=0)
            before = len(entry.uploaded_files)
            entry.uploaded_files = list(dict.fromkeys(entry.uploaded_files))
            entry.last_update = utc_now_iso()
            await asyncio.to_thread(self.save, entries)
            result = DedupResult(before=before, after=len(entry.uploaded_files))
            logger.info(
                "Deduplicated ledger for %s: %d -> %d (removed %d)",
                store_id,
                result.before,
                result.after,
                result.removed,
            )
            return result

    # ------------------------------------------------------------------
    # Read-only helpers (inspection; no self-healing)
    # ------------------------------------------------------------------

    def entries(self, store_id: str) -> list[str]:
        """Raw recorded file names for *store_id*, duplicates preserved."""
        entry = self.load().get(store_id)
        return list(entry.uploaded_files) if entry else []

    def count(self, store_id: str) -> int:
        return len(self.entries(store_id))

    def store_ids(self) -> list[str]:
        return list(self.load())
