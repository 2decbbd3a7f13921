"""Tests for the JSON-file catalog store, against a temporary data directory."""

import asyncio
import json

import pytest

from storefront.application.dto import ErrorKind
from storefront.application.reservation_store import ReservationStore
from storefront.domain.repository.catalog_store import ITEMS, ORDERS, CatalogStoreError
from storefront.infrastructure.persistence.json_cart_storage import JsonCartStorage
from storefront.infrastructure.persistence.json_catalog_store import JsonCatalogStore


def _store(tmp_path, items=None):
    if items is not None:
        (tmp_path / "items.json").write_text(json.dumps(items), encoding="utf-8")
    return JsonCatalogStore(tmp_path)


def _saved(tmp_path, collection):
    return json.loads((tmp_path / f"{collection}.json").read_text(encoding="utf-8"))


class TestGetById:

    def test_returns_copy_with_id(self, tmp_path):
        store = _store(tmp_path, {"slip": {"title": "Canvas Slip-On", "stock": 5}})

        document = asyncio.run(store.get_by_id(ITEMS, "slip"))
        document["stock"] = 0

        assert document["id"] == "slip"
        assert _saved(tmp_path, ITEMS)["slip"]["stock"] == 5

    def test_missing_document_is_none(self, tmp_path):
        store = _store(tmp_path, {})
        assert asyncio.run(store.get_by_id(ITEMS, "ghost")) is None

    def test_missing_collection_is_empty(self, tmp_path):
        assert asyncio.run(_store(tmp_path).get_by_id(ORDERS, "x")) is None

    @pytest.mark.parametrize("content", ["{broken", "[1, 2]"])
    def test_unreadable_collection_raises(self, tmp_path, content):
        (tmp_path / "items.json").write_text(content, encoding="utf-8")
        with pytest.raises(CatalogStoreError):
            asyncio.run(JsonCatalogStore(tmp_path).get_by_id(ITEMS, "slip"))


    @pytest.mark.parametrize("document", [["x"], "oops", 3])
    def test_non_object_document_raises(self, tmp_path, document):
        store = _store(tmp_path, {"bad": document})
        with pytest.raises(CatalogStoreError, match="not a JSON object"):
            asyncio.run(store.get_by_id(ITEMS, "bad"))

    def test_non_object_document_is_a_failed_reserve(self, tmp_path):
        store = _store(tmp_path, {"bad": ["x"]})
        reservations = ReservationStore(store, JsonCartStorage(tmp_path / "local_storage.json"))

        result = asyncio.run(reservations.reserve({"id": "bad"}, 1))

        assert not result.success
        assert result.error == ErrorKind.REMOTE_IO
        assert reservations.total_quantity() == 0


class TestUpdateFields:

    def test_dotted_path_replaces_only_that_size(self, tmp_path):
        store = _store(tmp_path, {
            "runner": {"talles": {
                "40": {"stock": {"A": 3, "B": 1}},
                "41": {"A": 2},
            }},
        })

        asyncio.run(store.update_fields(ITEMS, "runner", {"talles.40.stock": {"A": 0, "B": 1}}))

        talles = _saved(tmp_path, ITEMS)["runner"]["talles"]
        assert talles["40"] == {"stock": {"A": 0, "B": 1}}
        assert talles["41"] == {"A": 2}

    def test_top_level_field(self, tmp_path):
        store = _store(tmp_path, {"slip": {"stock": 5, "title": "Canvas Slip-On"}})
        asyncio.run(store.update_fields(ITEMS, "slip", {"stock": 3}))
        assert _saved(tmp_path, ITEMS)["slip"] == {"stock": 3, "title": "Canvas Slip-On"}

    def test_missing_document_raises(self, tmp_path):
        store = _store(tmp_path, {})
        with pytest.raises(CatalogStoreError):
            asyncio.run(store.update_fields(ITEMS, "ghost", {"stock": 1}))

    def test_non_object_document_raises(self, tmp_path):
        store = _store(tmp_path, {"bad": "oops"})
        with pytest.raises(CatalogStoreError, match="not a JSON object"):
            asyncio.run(store.update_fields(ITEMS, "bad", {"stock": 1}))


class TestInsert:

    def test_generates_distinct_ids(self, tmp_path):
        store = _store(tmp_path)

        first = asyncio.run(store.insert(ORDERS, {"total": 100}))
        second = asyncio.run(store.insert(ORDERS, {"total": 200}))

        assert first != second
        orders = _saved(tmp_path, ORDERS)
        assert orders[first] == {"total": 100}
        assert orders[second] == {"total": 200}
