"""Integration tests for the read-only use cases: stock view and delivery quote."""

import asyncio

import pytest

from storefront.application.quote_delivery import QuoteDeliveryHandler
from storefront.application.reservation_store import ReservationStore
from storefront.application.show_stock import ShowStockHandler
from storefront.domain.exceptions import ProductNotFoundError, RemoteIOError
from storefront.domain.model.delivery import DeliveryOptions, DeliveryType
from storefront.domain.model.value_objects import Money
from tests.fakes import FakeCartStorage, FakeCatalogStore

ITEMS = {
    "runner": {
        "title": "Air Runner",
        "price": 3200,
        "talles": {
            "40": {"stock": {"Centro": 2, "Pocitos": 0}},
            "41": {"Centro": 1, "Pocitos": 4},
        },
    },
    "slip": {"title": "Canvas Slip-On", "price": 1450, "stock": 5},
}


def _setup():
    catalog = FakeCatalogStore(ITEMS)
    reservations = ReservationStore(catalog, FakeCartStorage())
    return reservations, catalog


# ── ShowStockHandler ─────────────────────────────────────────────────────────


class TestShowStock:

    def test_sized_product_breakdown(self):
        reservations, catalog = _setup()
        asyncio.run(reservations.reserve({"id": "runner"}, 1, "41"))
        asyncio.run(reservations.reserve({"id": "runner"}, 2, "40"))

        view = asyncio.run(ShowStockHandler(catalog, reservations).handle("runner"))

        assert view.title == "Air Runner"
        assert view.total == 7
        assert [(s.size, s.total) for s in view.sizes] == [("40", 2), ("41", 5)]
        assert view.sizes[1].locations == {"Centro": 1, "Pocitos": 4}
        assert view.in_cart == 3

    def test_legacy_product_has_no_sizes(self):
        reservations, catalog = _setup()
        view = asyncio.run(ShowStockHandler(catalog, reservations).handle("slip"))
        assert view.total == 5
        assert view.sizes == []
        assert view.in_cart == 0

    def test_missing_product(self):
        reservations, catalog = _setup()
        with pytest.raises(ProductNotFoundError):
            asyncio.run(ShowStockHandler(catalog, reservations).handle("ghost"))

    def test_transport_failure(self):
        reservations, catalog = _setup()
        catalog.fail_reads.add("slip")
        with pytest.raises(RemoteIOError):
            asyncio.run(ShowStockHandler(catalog, reservations).handle("slip"))


# ── QuoteDeliveryHandler ─────────────────────────────────────────────────────


class TestQuoteDelivery:

    def test_quotes_the_current_cart(self):
        reservations, _ = _setup()
        asyncio.run(reservations.reserve({"id": "slip"}, 2))
        options = DeliveryOptions(DeliveryType.DOMESTIC, "Salto", packaging=True)

        result = QuoteDeliveryHandler(reservations).handle(options)

        assert result.subtotal == Money.of(2900)
        assert result.shipping == Money.of(250)
        assert result.total == Money.of(2900 + 250 + 100)

    def test_free_shipping_once_cart_reaches_threshold(self):
        reservations, _ = _setup()
        asyncio.run(reservations.reserve({"id": "runner"}, 1, "41"))
        asyncio.run(reservations.reserve({"id": "slip"}, 1))
        options = DeliveryOptions(DeliveryType.DOMESTIC, "Montevideo")

        result = QuoteDeliveryHandler(reservations).handle(options)

        assert result.free_shipping
        assert result.shipping == Money.zero()
        assert result.total == Money.of(4650)
