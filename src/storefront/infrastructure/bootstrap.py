"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions. Settings come from the
environment, with defaults suitable for a checkout of the repository.
"""

from __future__ import annotations

import os
from pathlib import Path

from storefront.application.checkout import CheckoutHandler
from storefront.application.quote_delivery import QuoteDeliveryHandler
from storefront.application.reservation_store import DEFAULT_STORAGE_KEY, ReservationStore
from storefront.application.show_stock import ShowStockHandler
from storefront.infrastructure.persistence.json_cart_storage import JsonCartStorage
from storefront.infrastructure.persistence.json_catalog_store import JsonCatalogStore

# Resolve data directory relative to the project root.
# When installed in editable mode the project root is the repo root.
_DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"


def data_dir() -> Path:
    return Path(os.environ.get("STOREFRONT_DATA_DIR", _DEFAULT_DATA_DIR))


def remote_timeout() -> float:
    return float(os.environ.get("STOREFRONT_REMOTE_TIMEOUT", "10"))


def cart_key() -> str:
    return os.environ.get("STOREFRONT_CART_KEY", DEFAULT_STORAGE_KEY)


def catalog_store() -> JsonCatalogStore:
    return JsonCatalogStore(data_dir())


def cart_storage() -> JsonCartStorage:
    return JsonCartStorage(data_dir() / "local_storage.json")


def reservation_store(catalog: JsonCatalogStore | None = None) -> ReservationStore:
    return ReservationStore(
        catalog or catalog_store(),
        cart_storage(),
        storage_key=cart_key(),
        timeout=remote_timeout(),
    )


def checkout_handler() -> CheckoutHandler:
    catalog = catalog_store()
    return CheckoutHandler(catalog, reservation_store(catalog), timeout=remote_timeout())


def show_stock_handler() -> ShowStockHandler:
    catalog = catalog_store()
    return ShowStockHandler(catalog, reservation_store(catalog), timeout=remote_timeout())


def quote_delivery_handler() -> QuoteDeliveryHandler:
    return QuoteDeliveryHandler(reservation_store())
