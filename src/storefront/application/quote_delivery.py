"""Application service: Quote Delivery use case (query)."""

from __future__ import annotations

from storefront.application.reservation_store import ReservationStore
from storefront.domain.model.delivery import DeliveryOptions, DeliveryQuote, quote


class QuoteDeliveryHandler:

    def __init__(self, reservations: ReservationStore) -> None:
        self._reservations = reservations

    def handle(self, options: DeliveryOptions) -> DeliveryQuote:
        """Price the current cart with the given delivery choices."""
        return quote(self._reservations.total_price(), options)
