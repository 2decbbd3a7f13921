"""Abstract document store holding catalog items and orders.

Defined in the domain layer so the domain never depends on
infrastructure. Every call is a suspension point; between a read and a
later write another session may change the same document. The store
offers no locking and no version check.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

ITEMS = "items"
ORDERS = "orders"


class CatalogStoreError(Exception):
    """Transport-level failure talking to the catalog store."""


class CatalogStore(ABC):

    @abstractmethod
    async def get_by_id(self, collection: str, document_id: str) -> dict[str, Any] | None:
        """Return a copy of the document, including its ``id``, or None."""

    @abstractmethod
    async def update_fields(
        self,
        collection: str,
        document_id: str,
        fields: dict[str, Any],
    ) -> None:
        """Overwrite the given fields of an existing document.

        Keys are dotted field paths (``"talles.40.stock"``) so a single
        nested map can be replaced without rewriting the whole document.
        """

    @abstractmethod
    async def insert(self, collection: str, record: dict[str, Any]) -> str:
        """Store a new document and return its generated id."""
