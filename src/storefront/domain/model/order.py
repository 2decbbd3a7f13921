"""Order record — written once per successful checkout.

An Order is a snapshot: the buyer's contact details, a copy of every cart
line as it stood at checkout, the computed total and a timestamp. There is
no update path once it is stored.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.cart import CartLine
from storefront.domain.model.delivery import DeliveryOptions, DeliveryQuote, quote
from storefront.domain.model.value_objects import Money

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


@dataclass(frozen=True)
class Buyer:
    name: str
    phone: str
    email: str

    @staticmethod
    def create(
        name: str,
        phone: str,
        email: str,
        confirm_email: str | None = None,
    ) -> Buyer:
        """Build a buyer, enforcing the contact rules checkout relies on."""
        if not name or not name.strip():
            raise ValidationError("Buyer name is required")
        if not email or not _EMAIL_RE.match(email.strip()):
            raise ValidationError(f"Invalid e-mail address: {email!r}")
        if confirm_email is not None and confirm_email.strip() != email.strip():
            raise ValidationError("E-mail addresses do not match")
        return Buyer(name=name.strip(), phone=(phone or "").strip(), email=email.strip())

    def to_raw(self) -> dict[str, str]:
        return {"name": self.name, "phone": self.phone, "email": self.email}


@dataclass
class Order:
    """Order snapshot.

    Use ``Order.create()`` for new orders. ``id`` stays ``None`` until the
    catalog store assigns one on insert.
    """

    id: str | None
    buyer: Buyer
    items: list[CartLine]
    total: Money
    date: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    delivery: DeliveryQuote | None = None

    @staticmethod
    def create(
        buyer: Buyer,
        lines: list[CartLine],
        delivery: DeliveryOptions | None = None,
    ) -> Order:
        """Snapshot *lines*; shipping and packaging are priced on their subtotal."""
        if not lines:
            raise ValidationError("Order must contain at least one item")

        items = [
            CartLine(
                product_id=line.product_id,
                size=line.size,
                quantity=line.quantity,
                title=line.title,
                unit_price=line.unit_price,
                image=line.image,
            )
            for line in lines
        ]
        order = Order(id=None, buyer=buyer, items=items, total=Money.zero())
        order.total = order.subtotal
        if delivery is not None:
            order.delivery = quote(order.subtotal, delivery)
            order.total = order.delivery.total
        return order

    @property
    def subtotal(self) -> Money:
        result = Money.zero()
        for line in self.items:
            result = result + line.line_total
        return result

    def to_raw(self) -> dict[str, Any]:
        raw: dict[str, Any] = {
            "buyer": self.buyer.to_raw(),
            "items": [line.to_raw() for line in self.items],
            "total": self.total.to_number(),
            "date": self.date.isoformat(),
        }
        if self.delivery is not None:
            raw["delivery"] = self.delivery.to_raw()
        return raw
