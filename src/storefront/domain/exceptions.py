"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the application layer can catch them uniformly at its boundary and turn
them into result values for the caller.
"""

from __future__ import annotations


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class ProductNotFoundError(EntityNotFoundError):
    """The catalog has no record for the requested product."""

    def __init__(self, product_id: str, title: str | None = None) -> None:
        self.product_id = product_id
        self.title = title
        super().__init__(f"Product {title or product_id!r} not found")


class InsufficientStockError(DomainException):
    """More units were requested than the catalog currently holds."""

    def __init__(
        self,
        message: str,
        *,
        requested: int,
        available: int,
        already_reserved: int = 0,
        size: str | None = None,
        locations: dict[str, int] | None = None,
    ) -> None:
        self.requested = requested
        self.available = available
        self.already_reserved = already_reserved
        self.size = size
        self.locations = dict(locations or {})
        super().__init__(message)


class RemoteIOError(DomainException):
    """The catalog store could not be reached or failed mid-call."""


class PartialSettlementError(DomainException):
    """The order was stored but decrementing stock failed afterwards."""

    def __init__(self, message: str, order_id: str) -> None:
        self.order_id = order_id
        super().__init__(message)
