"""Application service: Checkout settlement.

Turns the shopper's reservations into an order and takes the purchased
units out of the catalog. The phases run in order:

  1. Validate:  re-read every product; fail the whole checkout, with no
                order and no stock change, if any line is no longer
                covered by the catalog's stock.
  2. Order:     store the order record and keep its generated id.
  3. Decrement: for every line, concurrently, re-read the product and
                write back the reduced stock of that size only (or of the
                legacy flat ``stock`` field).
  4. Settle:    drop the ordered lines from the cart and hand back the
                order id.

The order is built from the cart lines as they stood when the attempt
started; lines another session adds meanwhile are neither charged nor
cleared.

The phases are not wrapped in a transaction. If phase 3 fails the order
already exists; the attempt ends as a partial settlement, the cart is left
as it was and nothing is compensated. Phase 3 reads the catalog again
instead of reusing phase 1's reads, so another buyer can still slip in
between the two.
"""

from __future__ import annotations

import asyncio
import logging

from storefront.application.dto import BuyerSpec, CheckoutResult, ErrorKind
from storefront.application.remote import remote_call
from storefront.application.reservation_store import ReservationStore
from storefront.domain.exceptions import (
    DomainException,
    InsufficientStockError,
    PartialSettlementError,
    ProductNotFoundError,
    ValidationError,
)
from storefront.domain.model.cart import CartLine
from storefront.domain.model.checkout import CheckoutAttempt
from storefront.domain.model.delivery import DeliveryOptions
from storefront.domain.model.order import Buyer, Order
from storefront.domain.model.stock import (
    FlatStock,
    allocate_decrement,
    normalize_stock,
)
from storefront.domain.repository.catalog_store import ITEMS, ORDERS, CatalogStore

log = logging.getLogger(__name__)


class CheckoutHandler:

    def __init__(
        self,
        catalog: CatalogStore,
        reservations: ReservationStore,
        *,
        timeout: float | None = None,
    ) -> None:
        self._catalog = catalog
        self._reservations = reservations
        self._timeout = timeout

    async def handle(
        self,
        buyer_spec: BuyerSpec,
        delivery: DeliveryOptions | None = None,
    ) -> CheckoutResult:
        """Run one checkout attempt from IDLE to SETTLED or FAILED."""
        attempt = CheckoutAttempt()
        lines = self._reservations.lines()

        try:
            buyer = Buyer.create(
                buyer_spec.name,
                buyer_spec.phone,
                buyer_spec.email,
                buyer_spec.confirm_email,
            )
        except ValidationError as exc:
            attempt.fail(str(exc))
            return self._failed(attempt, ErrorKind.INVALID_BUYER)

        if not lines:
            attempt.fail("The cart is empty")
            return self._failed(attempt, ErrorKind.EMPTY_CART)

        # Phase 1: validate every line against the catalog
        attempt.start_validation()
        try:
            for line in lines:
                await self._validate_line(line)
        except DomainException as exc:
            attempt.fail(str(exc))
            log.warning("Checkout refused during validation: %s", exc)
            return self._failed(attempt, ErrorKind.of(exc))

        # Phase 2: store the order
        attempt.start_order_creation()
        order = Order.create(buyer, lines, delivery=delivery)
        try:
            order.id = await remote_call(
                self._catalog.insert(ORDERS, order.to_raw()),
                self._timeout,
                "storing the order",
            )
        except DomainException as exc:
            attempt.fail(str(exc))
            log.warning("Checkout failed while storing the order: %s", exc)
            return self._failed(attempt, ErrorKind.of(exc))
        attempt.order_created(order.id)
        log.info("Order %s stored for %s, total %s", order.id, buyer.email, order.total)

        # Phase 3: take the purchased units out of the catalog
        try:
            await self._decrement_all(order)
        except PartialSettlementError as exc:
            attempt.fail(str(exc))
            log.error("Order %s stored but stock was not fully updated: %s", order.id, exc)
            return self._failed(attempt, ErrorKind.PARTIAL_SETTLEMENT)

        # Phase 4: settle
        attempt.settle()
        self._reservations.remove_lines(line.key for line in order.items)
        log.info("Order %s settled", order.id)
        return CheckoutResult(
            success=True,
            state=attempt.state.value,
            order_id=order.id,
            message=f"Thank you for your purchase! Your order number is {order.id}",
            total=str(order.total),
        )

    # --- Phases ---------------------------------------------------------------

    async def _validate_line(self, line: CartLine) -> None:
        document = await self._read(line)
        stock = normalize_stock(document)
        if line.size is None and stock.sizes:
            raise ValidationError(f"Please choose a size for {line.title}")
        available = stock.available(line.size)
        if available < line.quantity.value:
            raise InsufficientStockError(
                f"Insufficient stock for {line.label}: "
                f"{line.quantity.value} in cart, {available} available",
                requested=line.quantity.value,
                available=available,
                size=line.size,
            )

    async def _decrement_all(self, order: Order) -> None:
        results = await asyncio.gather(
            *(self._decrement_line(line) for line in order.items),
            return_exceptions=True,
        )
        failures = [
            (line, result)
            for line, result in zip(order.items, results)
            if isinstance(result, BaseException)
        ]
        for line, result in failures:
            if not isinstance(result, Exception):
                raise result
            log.error("Stock decrement failed for %s: %s", line.label, result)
        if failures:
            labels = ", ".join(line.label for line, _ in failures)
            raise PartialSettlementError(
                f"Order {order.id} was created but stock could not be updated for {labels}",
                order_id=order.id,  # type: ignore[arg-type]
            )

    async def _decrement_line(self, line: CartLine) -> None:
        document = await self._read(line)
        stock = normalize_stock(document)
        quantity = line.quantity.value

        if isinstance(stock, FlatStock):
            fields = {"stock": max(0, stock.count - quantity)}
        else:
            if line.size is None or line.size not in stock.by_size:
                raise ValidationError(f"{line.label} has no stock entry to decrement")
            entry = stock.by_size[line.size]
            fields = {entry.field_path(line.size): allocate_decrement(entry.locations, quantity)}

        await remote_call(
            self._catalog.update_fields(ITEMS, line.product_id, fields),
            self._timeout,
            f"updating stock of {line.product_id}",
        )
        log.debug("Decremented %s by %d: %s", line.label, quantity, fields)

    # --- Internal helpers -----------------------------------------------------

    async def _read(self, line: CartLine) -> dict:
        document = await remote_call(
            self._catalog.get_by_id(ITEMS, line.product_id),
            self._timeout,
            f"reading product {line.product_id}",
        )
        if document is None:
            raise ProductNotFoundError(line.product_id, line.title)
        return document

    @staticmethod
    def _failed(attempt: CheckoutAttempt, kind: ErrorKind) -> CheckoutResult:
        return CheckoutResult(
            success=False,
            state=attempt.state.value,
            order_id=attempt.order_id,
            message=attempt.reason or "",
            error=kind,
        )
