"""
Tests for the JSON record store and claim bundle loading.
"""
import json

import pytest

from claim_store.bundle import load_claim_bundle
from claim_store.record_store import (
    Collections,
    DocumentNotFound,
    JsonRecordStore,
    StorageError,
)


class TestJsonRecordStore:

    def test_create_and_get(self, record_store):
        created = record_store.create_document("things", "t1", {"name": "one"}, ['read("any")'])

        loaded = record_store.get_document("things", "t1")

        assert loaded.id == "t1"
        assert loaded.data == {"name": "one"}
        assert loaded.permissions == ['read("any")']
        assert loaded.created_at == created.created_at

    def test_generated_ids_are_unique(self, record_store):
        ids = {record_store.create_document("things", None, {}, []).id for _ in range(20)}
        assert len(ids) == 20

    def test_duplicate_id_is_rejected(self, record_store):
        record_store.create_document("things", "t1", {}, [])
        with pytest.raises(StorageError):
            record_store.create_document("things", "t1", {}, [])

    def test_missing_document(self, record_store):
        with pytest.raises(DocumentNotFound) as excinfo:
            record_store.get_document("things", "nope")
        assert excinfo.value.collection == "things"
        assert excinfo.value.document_id == "nope"

    def test_update_merges_data(self, record_store):
        record_store.create_document("things", "t1", {"a": 1, "b": 2}, ['read("user:u1")'])

        updated = record_store.update_document("things", "t1", {"b": 3})

        assert updated.data == {"a": 1, "b": 3}
        assert updated.permissions == ['read("user:u1")']

    def test_update_replaces_permissions(self, record_store):
        record_store.create_document("things", "t1", {}, ['read("user:u1")'])

        record_store.update_document("things", "t1", {}, ['read("user:u1")', 'read("any")'])

        assert record_store.get_document("things", "t1").permissions == ['read("user:u1")', 'read("any")']

    def test_update_missing_document(self, record_store):
        with pytest.raises(DocumentNotFound):
            record_store.update_document("things", "nope", {"a": 1})

    def test_delete_document(self, record_store):
        record_store.create_document("things", "t1", {}, [])
        record_store.create_document("things", "t2", {}, [])

        record_store.delete_document("things", "t1")

        with pytest.raises(DocumentNotFound):
            record_store.get_document("things", "t1")
        assert record_store.get_document("things", "t2").id == "t2"

    def test_delete_missing_document(self, record_store):
        with pytest.raises(DocumentNotFound):
            record_store.delete_document("things", "nope")

    def test_list_filter_order_and_page(self, record_store):
        for index, color in enumerate(["red", "blue", "red", "red"]):
            record_store.create_document("things", f"t{index}", {"color": color, "rank": 10 - index}, [])

        result = record_store.list_documents(
            "things", filters={"color": "red"}, order_by="rank", limit=2, offset=0
        )

        assert result.total == 3
        assert [doc.id for doc in result.documents] == ["t3", "t2"]

    def test_list_newest_first(self, record_store):
        for index in range(3):
            record_store.create_document("things", f"t{index}", {}, [])

        result = record_store.list_documents("things", order_by="created_at", descending=True)

        assert [doc.id for doc in result.documents] == ["t2", "t1", "t0"]

    def test_corrupt_collection_raises_storage_error(self, tmp_path):
        store = JsonRecordStore(tmp_path)
        (tmp_path / "things.json").write_text("{broken")

        with pytest.raises(StorageError):
            store.get_document("things", "t1")

    def test_file_layout(self, tmp_path):
        store = JsonRecordStore(tmp_path)
        store.create_document("things", "t1", {"a": 1}, ['read("any")'])

        raw = json.loads((tmp_path / "things.json").read_text(encoding="utf-8"))

        assert set(raw["t1"]) == {"data", "permissions", "created_at", "updated_at"}


class TestLoadClaimBundle:

    def test_missing_claim(self, record_store):
        with pytest.raises(DocumentNotFound):
            load_claim_bundle(record_store, "nope")

    def test_bundle_collects_dependents_in_order(self, record_store):
        record_store.create_document(
            Collections.CLAIMS, "c1", {"user_id": "u1", "claim_number": "CLM-1-ABCDEFGHI"}, []
        )
        record_store.create_document(
            Collections.CLAIM_DAMAGE_DETAILS, None,
            {"claim_id": "c1", "part_name": "Hood", "sort_order": 1, "is_inferred": True}, [],
        )
        record_store.create_document(
            Collections.CLAIM_DAMAGE_DETAILS, None,
            {"claim_id": "c1", "part_name": "Bumper", "sort_order": 0}, [],
        )
        record_store.create_document(
            Collections.CLAIM_DAMAGE_DETAILS, None,
            {"claim_id": "other", "part_name": "Door", "sort_order": 0}, [],
        )

        bundle = load_claim_bundle(record_store, "c1")

        assert [d.part_name for d in bundle.damage_details] == ["Bumper", "Hood"]
        assert [d.part_name for d in bundle.visible_damages] == ["Bumper"]
        assert [d.part_name for d in bundle.inferred_damages] == ["Hood"]
        assert bundle.vehicle_verification is None
        assert bundle.assessment is None
        assert bundle.claim.is_public is False
