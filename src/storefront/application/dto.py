"""Data Transfer Objects — plain containers that cross layer boundaries.

Application services never let a DomainException escape; they return one
of the result objects below, carrying either the outcome or what went
wrong, so callers can show it inline and carry on.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from storefront.domain.exceptions import (
    DomainException,
    InsufficientStockError,
    PartialSettlementError,
    ProductNotFoundError,
    RemoteIOError,
)


class ErrorKind(Enum):
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    PRODUCT_NOT_FOUND = "PRODUCT_NOT_FOUND"
    REMOTE_IO = "REMOTE_IO"
    SIZE_REQUIRED = "SIZE_REQUIRED"
    INVALID_QUANTITY = "INVALID_QUANTITY"
    INVALID_BUYER = "INVALID_BUYER"
    EMPTY_CART = "EMPTY_CART"
    PARTIAL_SETTLEMENT = "PARTIAL_SETTLEMENT"
    VALIDATION = "VALIDATION"

    @staticmethod
    def of(exc: DomainException) -> ErrorKind:
        if isinstance(exc, InsufficientStockError):
            return ErrorKind.INSUFFICIENT_STOCK
        if isinstance(exc, ProductNotFoundError):
            return ErrorKind.PRODUCT_NOT_FOUND
        if isinstance(exc, RemoteIOError):
            return ErrorKind.REMOTE_IO
        if isinstance(exc, PartialSettlementError):
            return ErrorKind.PARTIAL_SETTLEMENT
        return ErrorKind.VALIDATION


@dataclass(frozen=True)
class BuyerSpec:
    """Input: the buyer's contact details as typed into the checkout form."""

    name: str
    phone: str
    email: str
    confirm_email: str | None = None


@dataclass(frozen=True)
class CartResult:
    """Outcome of a cart operation.

    On INSUFFICIENT_STOCK the shortfall context is filled in; ``locations``
    then lists the locations that still hold units of the size.
    """

    success: bool
    message: str = ""
    error: ErrorKind | None = None
    requested: int | None = None
    available: int | None = None
    already_reserved: int = 0
    size: str | None = None
    locations: dict[str, int] = field(default_factory=dict)

    @staticmethod
    def ok(message: str = "") -> CartResult:
        return CartResult(success=True, message=message)

    @staticmethod
    def failed(exc: DomainException, kind: ErrorKind | None = None) -> CartResult:
        if isinstance(exc, InsufficientStockError):
            return CartResult(
                success=False,
                message=str(exc),
                error=ErrorKind.INSUFFICIENT_STOCK,
                requested=exc.requested,
                available=exc.available,
                already_reserved=exc.already_reserved,
                size=exc.size,
                locations={loc: n for loc, n in exc.locations.items() if n > 0},
            )
        return CartResult(success=False, message=str(exc), error=kind or ErrorKind.of(exc))


@dataclass(frozen=True)
class CheckoutResult:
    """Outcome of one checkout attempt.

    ``order_id`` is set on success, and also on PARTIAL_SETTLEMENT, where
    the order record exists although stock was not fully decremented.
    """

    success: bool
    state: str
    order_id: str | None = None
    message: str = ""
    error: ErrorKind | None = None
    total: str | None = None


@dataclass(frozen=True)
class CartLineDTO:
    product_id: str
    size: str | None
    title: str
    quantity: int
    unit_price: str  # formatted, e.g. "$2500.00"
    line_total: str


@dataclass(frozen=True)
class CartSummaryDTO:
    lines: list[CartLineDTO]
    total_quantity: int
    total_price: str


@dataclass(frozen=True)
class SizeStockDTO:
    size: str
    total: int
    locations: dict[str, int]


@dataclass(frozen=True)
class ProductStockDTO:
    product_id: str
    title: str
    total: int
    sizes: list[SizeStockDTO]
    in_cart: int
