"""Application service: the shopper's reservation store (the cart).

Owns one Cart and guards it against overselling relative to the catalog
store's current stock:

- ``reserve`` and ``set_quantity`` re-read the product record and refuse
  to go above what the catalog holds. They are the only gates against
  overselling at add time.
- ``set_quantity_local``, ``remove`` and ``clear`` never touch the
  network. Lowering a quantity cannot oversell, so the "-" button does not
  pay for a round-trip while the "+" button does.

Every mutation mirrors the whole cart into the local storage slot, and the
cart is restored from that slot on construction. Writes to the same slot
made through other storage handles (another tab) replace the cart
wholesale, last writer wins.

Nothing raises past a public operation: failures come back as a
CartResult.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable, Iterable, Mapping
from contextlib import asynccontextmanager
from typing import Any

from storefront.application.dto import (
    CartLineDTO,
    CartResult,
    CartSummaryDTO,
    ErrorKind,
)
from storefront.application.remote import remote_call
from storefront.domain.exceptions import (
    DomainException,
    InsufficientStockError,
    ProductNotFoundError,
    ValidationError,
)
from storefront.domain.model.cart import Cart, CartLine, LineKey
from storefront.domain.model.stock import SizedStock, normalize_stock
from storefront.domain.model.value_objects import Money
from storefront.domain.repository.cart_storage import CartStorage
from storefront.domain.repository.catalog_store import ITEMS, CatalogStore

log = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "cart"


def _size_suffix(size: str | None) -> str:
    return f" for size {size}" if size is not None else ""


class ReservationStore:

    def __init__(
        self,
        catalog: CatalogStore,
        storage: CartStorage,
        *,
        storage_key: str = DEFAULT_STORAGE_KEY,
        timeout: float | None = None,
    ) -> None:
        self._catalog = catalog
        self._storage = storage
        self._key = storage_key
        self._timeout = timeout
        self._locks: dict[LineKey, list] = {}
        self._cart = self._parse(storage.get(storage_key), source="storage")
        self._unsubscribe = storage.subscribe(self._on_storage_change)

    def close(self) -> None:
        """Stop following changes made by other storage handles."""
        self._unsubscribe()

    # --- Remote-validated operations ------------------------------------------

    async def reserve(
        self,
        product: Mapping[str, Any],
        requested_qty: int,
        size: str | None = None,
    ) -> CartResult:
        """Add *requested_qty* units of *product* (in *size*) to the cart.

        Fails without touching the cart if what is already reserved plus
        the request would exceed the catalog's current stock.
        """
        if isinstance(requested_qty, bool) or not isinstance(requested_qty, int) or requested_qty <= 0:
            return CartResult(
                success=False,
                message="Quantity must be greater than 0",
                error=ErrorKind.INVALID_QUANTITY,
            )

        if product.get("id") is None:
            return CartResult(
                success=False,
                message="Product id is required",
                error=ErrorKind.VALIDATION,
            )

        product_id = str(product["id"])
        try:
            async with self._serialized((product_id, size)):
                document = await self._fetch(product_id, product.get("title"))
                stock = normalize_stock(document)

                if size is None and stock.sizes:
                    return CartResult(
                        success=False,
                        message="Please select a size before adding to the cart",
                        error=ErrorKind.SIZE_REQUIRED,
                    )

                already_reserved = self._cart.reserved(product_id, size)
                available = stock.available(size)
                if already_reserved + requested_qty > available:
                    raise self._shortfall(
                        stock, size, requested_qty, available, already_reserved
                    )

                line = CartLine.snapshot({**document, **product}, size, requested_qty)
                self._cart.add(line)
                self._persist()
        except DomainException as exc:
            log.warning("Reserve of %s%s refused: %s", product_id, _size_suffix(size), exc)
            return CartResult.failed(exc)

        log.info(
            "Reserved %d x %s%s (now %d in cart)",
            requested_qty, product_id, _size_suffix(size),
            self._cart.reserved(product_id, size),
        )
        return CartResult.ok(f"Added {requested_qty} to the cart")

    async def set_quantity(
        self,
        product_id: str,
        new_qty: int,
        size: str | None = None,
    ) -> CartResult:
        """Set a line to *new_qty* after checking the catalog's stock.

        A quantity of zero or below removes the line.
        """
        return await self._change_quantity(product_id, size, lambda _: new_qty)

    async def increment(self, product_id: str, size: str | None = None) -> CartResult:
        """The "+" button: one more unit, checked against the catalog."""
        return await self._change_quantity(product_id, size, lambda current: current + 1)

    async def _change_quantity(
        self,
        product_id: str,
        size: str | None,
        target: Callable[[int], int],
    ) -> CartResult:
        try:
            async with self._serialized((product_id, size)):
                self._require_line(product_id, size)
                new_qty = target(self._cart.reserved(product_id, size))
                document = await self._fetch(product_id)
                stock = normalize_stock(document)
                available = stock.available(size)
                if new_qty > available:
                    raise InsufficientStockError(
                        f"Insufficient stock. Available: {available}",
                        requested=new_qty,
                        available=available,
                        already_reserved=self._cart.reserved(product_id, size),
                        size=size,
                        locations=self._locations(stock, size),
                    )
                self._cart.set_quantity(product_id, new_qty, size)
                self._persist()
        except DomainException as exc:
            log.warning("Quantity change of %s%s refused: %s", product_id, _size_suffix(size), exc)
            return CartResult.failed(exc)
        return CartResult.ok()

    # --- Local operations -----------------------------------------------------

    def set_quantity_local(
        self,
        product_id: str,
        new_qty: int,
        size: str | None = None,
    ) -> CartResult:
        """Set a line's quantity without asking the catalog.

        Only safe for lowering a quantity.
        """
        try:
            self._require_line(product_id, size)
            self._cart.set_quantity(product_id, new_qty, size)
        except ValidationError as exc:
            return CartResult.failed(exc)
        self._persist()
        return CartResult.ok()

    def decrement(self, product_id: str, size: str | None = None) -> CartResult:
        """The "-" button: one unit less; the line goes away at zero."""
        return self.set_quantity_local(
            product_id, self._cart.reserved(product_id, size) - 1, size
        )

    def remove(self, product_id: str, size: str | None = None) -> None:
        self._cart.remove(product_id, size)
        self._persist()

    def remove_lines(self, keys: Iterable[LineKey]) -> None:
        for product_id, size in keys:
            self._cart.remove(product_id, size)
        self._persist()

    def clear(self) -> None:
        self._cart.clear()
        self._persist()

    # --- Queries --------------------------------------------------------------

    def lines(self) -> list[CartLine]:
        return list(self._cart)

    def find(self, product_id: str, size: str | None = None) -> CartLine | None:
        return self._cart.get(product_id, size)

    def reserved(self, product_id: str, size: str | None = None) -> int:
        return self._cart.reserved(product_id, size)

    def is_in_cart(self, product_id: str) -> bool:
        return self._cart.contains_product(product_id)

    def total_quantity(self) -> int:
        return self._cart.total_quantity

    def total_price(self) -> Money:
        return self._cart.total_price

    def summary(self) -> CartSummaryDTO:
        return CartSummaryDTO(
            lines=[
                CartLineDTO(
                    product_id=line.product_id,
                    size=line.size,
                    title=line.title,
                    quantity=line.quantity.value,
                    unit_price=str(line.unit_price),
                    line_total=str(line.line_total),
                )
                for line in self._cart
            ],
            total_quantity=self.total_quantity(),
            total_price=str(self.total_price()),
        )

    def serialized(self) -> str:
        return json.dumps(self._cart.to_raw(), ensure_ascii=False)

    # --- Internal helpers -----------------------------------------------------

    async def _fetch(self, product_id: str, title: str | None = None) -> dict[str, Any]:
        document = await remote_call(
            self._catalog.get_by_id(ITEMS, product_id),
            self._timeout,
            f"reading product {product_id}",
        )
        if document is None:
            raise ProductNotFoundError(product_id, title)
        return document

    def _require_line(self, product_id: str, size: str | None) -> None:
        if self._cart.get(product_id, size) is None:
            raise ValidationError(f"{product_id}{_size_suffix(size)} is not in the cart")

    @staticmethod
    def _locations(stock, size: str | None) -> dict[str, int]:
        if isinstance(stock, SizedStock) and size is not None:
            return stock.locations(size)
        return {}

    def _shortfall(
        self,
        stock,
        size: str | None,
        requested: int,
        available: int,
        already_reserved: int,
    ) -> InsufficientStockError:
        locations = self._locations(stock, size)
        message = f"Only {max(0, available - already_reserved)} units available{_size_suffix(size)}"
        in_stock = ", ".join(f"{loc}: {n}" for loc, n in locations.items() if n > 0)
        if in_stock:
            message += f" ({in_stock})"
        return InsufficientStockError(
            message,
            requested=requested,
            available=available,
            already_reserved=already_reserved,
            size=size,
            locations=locations,
        )

    @asynccontextmanager
    async def _serialized(self, key: LineKey):
        """Run one read-validate-write on *key* at a time within this store."""
        entry = self._locks.setdefault(key, [asyncio.Lock(), 0])
        entry[1] += 1
        try:
            async with entry[0]:
                yield
        finally:
            entry[1] -= 1
            if entry[1] == 0:
                del self._locks[key]

    def _persist(self) -> None:
        try:
            self._storage.set(self._key, self.serialized())
        except OSError:
            log.exception("Could not write the cart to local storage")

    def _on_storage_change(self, key: str, new_value: str | None) -> None:
        if key != self._key:
            return
        self._cart = self._parse(new_value, source="another session")
        log.debug("Cart replaced from %s: %d lines", key, len(self._cart))

    @staticmethod
    def _parse(value: str | None, source: str) -> Cart:
        if value is None:
            return Cart()
        try:
            return Cart.from_raw(json.loads(value))
        except (ValueError, KeyError, TypeError, ValidationError) as exc:
            log.warning("Ignoring malformed cart data from %s: %s", source, exc)
            return Cart()
