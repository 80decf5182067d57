"""Tests for remote store resolution, canonical selection and reconciliation."""

from __future__ import annotations

import pytest

from ragsync.models import RemoteStore, normalize_store_listing
from ragsync.sync.stores import RemoteStoreDirectory, select_canonical

NAME = "national-security-documents-store"


# ======================================================================
# Canonical selection
# ======================================================================


class TestSelectCanonical:
    def test_empty(self):
        assert select_canonical([]) is None

    def test_greatest_document_count_wins(self):
        stores = [RemoteStore("s/a", NAME, 5), RemoteStore("s/b", NAME, 12), RemoteStore("s/c", NAME, 3)]
        assert select_canonical(stores).store_id == "s/b"

    def test_tie_goes_to_first_listed(self):
        stores = [RemoteStore("s/a", NAME, 7), RemoteStore("s/b", NAME, 7)]
        assert select_canonical(stores).store_id == "s/a"


# ======================================================================
# Directory operations
# ======================================================================


class TestRemoteStoreDirectory:
    async def test_get_or_create_creates_when_absent(self, directory, remote):
        store, is_new = await directory.get_or_create(NAME)

        assert is_new is True
        assert store.display_name == NAME
        assert remote.created == [store.store_id]

    async def test_get_or_create_is_idempotent(self, directory, remote):
        first, first_new = await directory.get_or_create(NAME)
        second, second_new = await directory.get_or_create(NAME)

        assert first_new is True
        assert second_new is False
        assert second.store_id == first.store_id
        assert len(remote.created) == 1

    async def test_get_or_create_collapses_duplicates(self, directory, remote):
        remote.add_store(NAME, 5)
        keep = remote.add_store(NAME, 12)
        remote.add_store(NAME, 3)
        remote.add_store("other-store", 1)

        store, is_new = await directory.get_or_create(NAME)

        assert is_new is False
        assert store.store_id == keep.store_id
        assert remote.names().count(NAME) == 1
        assert "other-store" in remote.names()

    async def test_resolve_canonical_does_not_modify(self, directory, remote):
        remote.add_store(NAME, 5)
        keep = remote.add_store(NAME, 12)
        remote.add_store(NAME, 3)

        store = await directory.resolve_canonical(NAME)

        assert store.store_id == keep.store_id
        assert remote.names().count(NAME) == 3
        assert remote.deleted == []

    async def test_resolve_canonical_none(self, directory):
        assert await directory.resolve_canonical(NAME) is None

    async def test_reconcile_converges_to_canonical(self, directory, remote):
        remote.add_store(NAME, 5)
        keep = remote.add_store(NAME, 12)
        remote.add_store(NAME, 3)

        result = await directory.reconcile_duplicates(NAME)

        assert result.found == 3
        assert result.kept == keep.store_id
        assert result.deleted_count == 2
        remaining = await directory.find_by_display_name(NAME)
        assert [s.store_id for s in remaining] == [keep.store_id]
        assert remaining[0].active_document_count == 12

    async def test_get_or_create_tie_keeps_first_listed(self, directory, remote):
        first = remote.add_store(NAME, 7)
        second = remote.add_store(NAME, 7)

        store, is_new = await directory.get_or_create(NAME)

        assert (store.store_id, is_new) == (first.store_id, False)
        assert remote.deleted == [second.store_id]

    async def test_reconcile_single_store_is_noop(self, directory, remote):
        only = remote.add_store(NAME, 4)

        result = await directory.reconcile_duplicates(NAME)

        assert (result.found, result.kept, result.deleted_ids) == (1, only.store_id, [])
        assert remote.deleted == []

    async def test_reconcile_never_creates(self, directory, remote):
        result = await directory.reconcile_duplicates(NAME)
        assert result.found == 0
        assert result.kept is None
        assert remote.created == []

    async def test_reconcile_records_failed_delete(self, directory, remote):
        keep = remote.add_store(NAME, 10)
        stuck = remote.add_store(NAME, 1)
        remote.fail_delete.add(stuck.store_id)

        result = await directory.reconcile_duplicates(NAME)

        assert result.kept == keep.store_id
        assert result.failed_ids == [stuck.store_id]
        assert result.deleted_ids == []

    async def test_delete_clears_ledger_entry(self, directory, remote, ledger):
        store = remote.add_store(NAME, 1)
        await ledger.record_success(store.store_id, "a.txt")
        await ledger.record_success("fileSearchStores/keep", "b.txt")

        await directory.delete(store.store_id)

        assert remote.deleted == [store.store_id]
        assert ledger.store_ids() == ["fileSearchStores/keep"]

    async def test_collapse_clears_ledger_of_deleted(self, directory, remote, ledger):
        remote.add_store(NAME, 12)
        loser = remote.add_store(NAME, 2)
        await ledger.record_success(loser.store_id, "a.txt")

        await directory.get_or_create(NAME)

        assert loser.store_id not in ledger.store_ids()

    async def test_get_unknown_store(self, directory):
        assert await directory.get("fileSearchStores/missing") is None


# ======================================================================
# Listing normalization
# ======================================================================


class TestListingNormalization:
    def test_from_camel_case_mapping(self):
        store = RemoteStore.from_api(
            {
                "name": "fileSearchStores/abc",
                "displayName": NAME,
                "activeDocumentsCount": "42",
                "sizeBytes": "2048",
                "createTime": "2026-01-01T00:00:00Z",
            }
        )
        assert store.store_id == "fileSearchStores/abc"
        assert store.display_name == NAME
        assert store.active_document_count == 42
        assert store.size_bytes == 2048
        assert store.create_time == "2026-01-01T00:00:00Z"

    def test_from_sdk_object(self):
        class Raw:
            name = "fileSearchStores/xyz"
            display_name = NAME
            active_documents_count = None
            size_bytes = 10
            create_time = None
            update_time = None

        store = RemoteStore.from_api(Raw())
        assert store.active_document_count == 0
        assert store.size_bytes == 10

    def test_missing_name_raises(self):
        with pytest.raises(ValueError):
            RemoteStore.from_api({"displayName": NAME})

    @pytest.mark.parametrize("key", ["fileSearchStores", "file_search_stores", "pageInternal"])
    def test_listing_keys(self, key):
        payload = {key: [{"name": "s/1", "displayName": "a"}, {"name": "s/2", "displayName": "b"}]}
        assert [s.store_id for s in normalize_store_listing(payload)] == ["s/1", "s/2"]

    def test_plain_sequence(self):
        assert len(normalize_store_listing([{"name": "s/1"}])) == 1

    def test_empty_shapes(self):
        assert normalize_store_listing(None) == []
        assert normalize_store_listing({}) == []
