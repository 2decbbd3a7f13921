"""In-memory fakes for testing.

These implement the same abstract interfaces as the JSON-backed
infrastructure but keep everything in dicts. No file I/O, no side effects.
"""

from __future__ import annotations

import copy
from collections.abc import Callable
from typing import Any

from storefront.domain.repository.cart_storage import CartStorage, StorageListener
from storefront.domain.repository.catalog_store import CatalogStore, CatalogStoreError


class FakeCatalogStore(CatalogStore):
    """Catalog store with hooks for simulating other sessions and outages.

    - ``fail_reads`` / ``fail_updates``: product ids whose reads / updates
      raise CatalogStoreError.
    - ``fail_inserts``: make every insert raise CatalogStoreError.
    - ``on_read``: called with ``(collection, id)`` before each read, to
      let a test mutate documents between phases.
    """

    def __init__(self, items: dict[str, dict[str, Any]] | None = None) -> None:
        self.collections: dict[str, dict[str, dict[str, Any]]] = {
            "items": copy.deepcopy(items or {}),
            "orders": {},
        }
        self.fail_reads: set[str] = set()
        self.fail_updates: set[str] = set()
        self.fail_inserts = False
        self.on_read: Callable[[str, str], None] | None = None
        self.reads: list[tuple[str, str]] = []
        self.updates: list[tuple[str, str, dict[str, Any]]] = []
        self._next_id = 1

    # --- CatalogStore interface -----------------------------------------------

    async def get_by_id(self, collection: str, document_id: str) -> dict[str, Any] | None:
        self.reads.append((collection, document_id))
        if self.on_read is not None:
            self.on_read(collection, document_id)
        if document_id in self.fail_reads:
            raise CatalogStoreError("network unreachable")
        document = self.collections.setdefault(collection, {}).get(document_id)
        if document is None:
            return None
        return {**copy.deepcopy(document), "id": document_id}

    async def update_fields(
        self,
        collection: str,
        document_id: str,
        fields: dict[str, Any],
    ) -> None:
        if document_id in self.fail_updates:
            raise CatalogStoreError("write rejected")
        document = self.collections[collection][document_id]
        for path, value in fields.items():
            *parents, leaf = path.split(".")
            target = document
            for part in parents:
                target = target.setdefault(part, {})
            target[leaf] = copy.deepcopy(value)
        self.updates.append((collection, document_id, copy.deepcopy(fields)))

    async def insert(self, collection: str, record: dict[str, Any]) -> str:
        if self.fail_inserts:
            raise CatalogStoreError("insert rejected")
        document_id = f"order-{self._next_id}"
        self._next_id += 1
        self.collections.setdefault(collection, {})[document_id] = copy.deepcopy(record)
        return document_id

    # --- Test helpers ---------------------------------------------------------

    def item(self, product_id: str) -> dict[str, Any]:
        return self.collections["items"][product_id]

    @property
    def orders(self) -> dict[str, dict[str, Any]]:
        return self.collections["orders"]


class SharedSlots:
    """The storage area that several FakeCartStorage handles share."""

    def __init__(self) -> None:
        self.values: dict[str, str] = {}
        self.handles: list[FakeCartStorage] = []


class FakeCartStorage(CartStorage):
    """Local storage handle; handles on the same SharedSlots see each other."""

    def __init__(self, shared: SharedSlots | None = None) -> None:
        self.shared = shared or SharedSlots()
        self.shared.handles.append(self)
        self._listeners: list[StorageListener] = []
        self.writes = 0

    def get(self, key: str) -> str | None:
        return self.shared.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.writes += 1
        self.shared.values[key] = value
        for handle in self.shared.handles:
            if handle is not self:
                handle.emit(key, value)

    def subscribe(self, listener: StorageListener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def emit(self, key: str, value: str | None) -> None:
        for listener in list(self._listeners):
            listener(key, value)
