"""Delivery and pricing rules.

Pure functions, recomputed whenever the subtotal or the shopper's delivery
choices change. Nothing here is persisted and nothing here fails.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from storefront.domain.model.value_objects import Money

# ---------------------------------------------------------------------------
# Constants for business rules
# ---------------------------------------------------------------------------
FREE_SHIPPING_THRESHOLD = Money(Decimal("4000"))
PRIMARY_CITY = "Montevideo"
PRIMARY_CITY_COST = Money(Decimal("150"))
DOMESTIC_COST = Money(Decimal("250"))
INTERNATIONAL_COST = Money(Decimal("2000"))
PACKAGING_COST = Money(Decimal("100"))

DOMESTIC_DESTINATIONS = (
    "Montevideo", "Canelones", "Maldonado", "Rocha", "Treinta y Tres",
    "Cerro Largo", "Rivera", "Artigas", "Salto", "Paysandú",
    "Río Negro", "Soriano", "Colonia", "San José", "Flores",
    "Florida", "Durazno", "Tacuarembó", "Lavalleja",
)

INTERNATIONAL_DESTINATIONS = (
    "Argentina", "Brasil", "Chile", "Paraguay", "Bolivia",
    "Colombia", "Venezuela", "Ecuador", "Perú", "Estados Unidos",
    "México", "España", "Francia", "Italia", "Alemania",
    "Reino Unido", "Canadá", "Australia", "Japón", "China",
)


class DeliveryType(Enum):
    PICKUP = "pickup"
    DOMESTIC = "domestic"
    INTERNATIONAL = "international"


@dataclass(frozen=True)
class DeliveryOptions:
    """What the shopper picked at checkout.

    ``destination`` is a department for domestic shipping, a country for
    international shipping, and ignored for store pickup.
    """

    type: DeliveryType = DeliveryType.PICKUP
    destination: str | None = None
    packaging: bool = False


@dataclass(frozen=True)
class DeliveryQuote:
    options: DeliveryOptions
    subtotal: Money
    shipping: Money
    packaging: Money
    total: Money
    free_shipping: bool

    def to_raw(self) -> dict:
        return {
            "type": self.options.type.value,
            "destination": self.options.destination,
            "packaging": self.options.packaging,
            "shipping_cost": self.shipping.to_number(),
            "packaging_cost": self.packaging.to_number(),
        }


def is_free_shipping(subtotal: Money) -> bool:
    return subtotal >= FREE_SHIPPING_THRESHOLD


def shipping_cost(
    delivery_type: DeliveryType,
    destination: str | None,
    subtotal: Money,
) -> Money:
    """Shipping price for the chosen delivery type and destination.

    Only domestic shipping qualifies for free shipping. Until a destination
    is chosen no shipping is charged.
    """
    if delivery_type is DeliveryType.PICKUP or not destination:
        return Money.zero()
    if delivery_type is DeliveryType.INTERNATIONAL:
        return INTERNATIONAL_COST
    if is_free_shipping(subtotal):
        return Money.zero()
    if destination == PRIMARY_CITY:
        return PRIMARY_CITY_COST
    return DOMESTIC_COST


def packaging_cost(selected: bool) -> Money:
    return PACKAGING_COST if selected else Money.zero()


def order_total(
    subtotal: Money,
    delivery_type: DeliveryType,
    destination: str | None,
    packaging: bool,
) -> Money:
    return (
        subtotal
        + shipping_cost(delivery_type, destination, subtotal)
        + packaging_cost(packaging)
    )


def quote(subtotal: Money, options: DeliveryOptions) -> DeliveryQuote:
    shipping = shipping_cost(options.type, options.destination, subtotal)
    packaging = packaging_cost(options.packaging)
    return DeliveryQuote(
        options=options,
        subtotal=subtotal,
        shipping=shipping,
        packaging=packaging,
        total=subtotal + shipping + packaging,
        free_shipping=is_free_shipping(subtotal),
    )
