"""Cart aggregate — the shopper's reservation lines.

Lines are keyed by ``(product_id, size)``; ``size`` is ``None`` for
products sold without sizes. The display fields of a line (title, unit
price, image) are a snapshot taken when the line is first created and are
never refreshed from the catalog.

The Cart knows nothing about remote stock: availability checks belong to
the reservation store that owns it. A line that drops to zero or below is
removed, never kept at zero.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.value_objects import Money, Quantity

LineKey = tuple[str, "str | None"]


@dataclass
class CartLine:
    """One reservation in the cart."""

    product_id: str
    size: str | None
    quantity: Quantity
    title: str
    unit_price: Money
    image: str | None = None

    @property
    def key(self) -> LineKey:
        return (self.product_id, self.size)

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value

    @property
    def label(self) -> str:
        if self.size is None:
            return self.title
        return f"{self.title} (size {self.size})"

    # --- Serialization --------------------------------------------------------

    def to_raw(self) -> dict[str, Any]:
        return {
            "id": self.product_id,
            "size": self.size,
            "quantity": self.quantity.value,
            "title": self.title,
            "price": self.unit_price.to_number(),
            "image": self.image,
        }

    @staticmethod
    def from_raw(raw: Mapping[str, Any]) -> CartLine:
        """Rebuild a line from its stored form.

        Raises ValidationError (or KeyError/TypeError for missing fields)
        on malformed input; callers reading untrusted storage catch these.
        """
        if not isinstance(raw, Mapping):
            raise ValidationError(f"Cart line must be an object, got {type(raw).__name__}")
        size = raw.get("size")
        return CartLine(
            product_id=str(raw["id"]),
            size=None if size is None else str(size),
            quantity=Quantity(raw["quantity"]),
            title=str(raw.get("title") or raw["id"]),
            unit_price=Money.of(raw["price"]),
            image=raw.get("image"),
        )

    @staticmethod
    def snapshot(product: Mapping[str, Any], size: str | None, quantity: int) -> CartLine:
        """Create a new line from a catalog record at reservation time."""
        product_id = str(product["id"])
        return CartLine(
            product_id=product_id,
            size=size,
            quantity=Quantity(quantity),
            title=str(product.get("title") or product_id),
            unit_price=Money.of(product.get("price", 0)),
            image=product.get("image") or product.get("pictureUrl"),
        )


class Cart:
    """Ordered collection of CartLines, at most one per key."""

    def __init__(self, lines: Iterable[CartLine] = ()) -> None:
        self._lines: dict[LineKey, CartLine] = {}
        for line in lines:
            if line.key in self._lines:
                raise ValidationError(f"Duplicate cart line for {line.label}")
            self._lines[line.key] = line

    def __iter__(self) -> Iterator[CartLine]:
        return iter(list(self._lines.values()))

    def __len__(self) -> int:
        return len(self._lines)

    # --- Queries --------------------------------------------------------------

    def get(self, product_id: str, size: str | None = None) -> CartLine | None:
        return self._lines.get((product_id, size))

    def reserved(self, product_id: str, size: str | None = None) -> int:
        line = self.get(product_id, size)
        return line.quantity.value if line is not None else 0

    def contains_product(self, product_id: str) -> bool:
        return any(pid == product_id for pid, _ in self._lines)

    @property
    def total_quantity(self) -> int:
        return sum(line.quantity.value for line in self._lines.values())

    @property
    def total_price(self) -> Money:
        result = Money.zero()
        for line in self._lines.values():
            result = result + line.line_total
        return result

    # --- Mutations ------------------------------------------------------------

    def add(self, line: CartLine) -> CartLine:
        """Insert *line*, or add its quantity to the existing line."""
        existing = self._lines.get(line.key)
        if existing is None:
            self._lines[line.key] = line
            return line
        existing.quantity = Quantity(existing.quantity.value + line.quantity.value)
        return existing

    def set_quantity(self, product_id: str, quantity: int, size: str | None = None) -> None:
        """Set a line's quantity; zero or below removes the line.

        Setting a quantity on a line that does not exist is a no-op.
        """
        if not isinstance(quantity, int) or isinstance(quantity, bool):
            raise ValidationError(
                f"Quantity must be an integer, got {type(quantity).__name__}"
            )
        key = (product_id, size)
        if quantity <= 0:
            self._lines.pop(key, None)
            return
        line = self._lines.get(key)
        if line is not None:
            line.quantity = Quantity(quantity)

    def remove(self, product_id: str, size: str | None = None) -> None:
        self._lines.pop((product_id, size), None)

    def clear(self) -> None:
        self._lines.clear()

    # --- Serialization --------------------------------------------------------

    def to_raw(self) -> list[dict[str, Any]]:
        return [line.to_raw() for line in self._lines.values()]

    @staticmethod
    def from_raw(raw: Any) -> Cart:
        if not isinstance(raw, list):
            raise ValidationError(f"Cart data must be a list, got {type(raw).__name__}")
        return Cart(CartLine.from_raw(item) for item in raw)
