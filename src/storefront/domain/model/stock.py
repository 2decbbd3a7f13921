"""Stock aggregation over catalog product records.

A product record carries its inventory in one of two shapes:

- a legacy flat ``stock`` count, or
- a ``talles`` map of size label -> size entry, where each size entry is
  either ``{"stock": {location: count}}`` or directly ``{location: count}``.

Every function here is pure and never raises. Malformed data at any level
of nesting counts as zero stock: a shopper sees "no stock", never an error.

``normalize_stock()`` turns a raw record into ``FlatStock`` or
``SizedStock`` once, at the point where a catalog document is read; the
reservation and checkout services work with those variants only.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

# Top-level keys of a ``talles`` map that describe the map, not a size.
RESERVED_SIZE_KEYS = frozenset({"valor", "stock"})


def _count(value: Any) -> int:
    """Coerce one stock leaf to a non-negative int; anything odd is 0."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    if isinstance(value, float) and not math.isfinite(value):
        return 0
    return max(0, int(value))


def _locations_of(size_entry: Any) -> Mapping[str, Any]:
    """Return the raw location map of a size entry, unwrapping ``stock``."""
    if not isinstance(size_entry, Mapping):
        return {}
    nested = size_entry.get("stock")
    if isinstance(nested, Mapping):
        return nested
    return size_entry


def size_total(size_entry: Any) -> int:
    """Total units of one size across all locations."""
    return sum(_count(v) for v in _locations_of(size_entry).values())


def product_total(talles: Any) -> int:
    """Total units of a product across every size and location."""
    if not isinstance(talles, Mapping):
        return 0
    return sum(
        size_total(entry)
        for key, entry in talles.items()
        if key not in RESERVED_SIZE_KEYS
    )


def available_sizes(product: Mapping[str, Any]) -> list[str]:
    """Size labels in the order they were authored."""
    talles = product.get("talles")
    if not isinstance(talles, Mapping):
        return []
    return [str(key) for key in talles if key not in RESERVED_SIZE_KEYS]


def location_breakdown(product: Mapping[str, Any], size: str | None) -> dict[str, int]:
    """Per-location counts for *size*, or ``{}`` when there is no such size."""
    talles = product.get("talles")
    if size is None or not isinstance(talles, Mapping) or size in RESERVED_SIZE_KEYS:
        return {}
    return {
        str(location): _count(count)
        for location, count in _locations_of(talles.get(size)).items()
    }


def requires_size(product: Mapping[str, Any]) -> bool:
    return bool(available_sizes(product))


def available_stock(product: Mapping[str, Any], size: str | None = None) -> int:
    """Units a shopper may reserve for *size* (or the whole product).

    Sized and flat representations are mutually exclusive: a product with a
    ``talles`` map never falls back to its legacy ``stock`` field.
    """
    return normalize_stock(product).available(size)


def allocate_decrement(locations: Mapping[str, int], quantity: int) -> dict[str, int]:
    """Drain *quantity* units from *locations* in map order.

    Each location gives up at most what it holds; locations at zero are
    skipped and allocation stops as soon as the quantity is covered.

    >>> allocate_decrement({"A": 3, "B": 0, "C": 5}, 4)
    {'A': 0, 'B': 0, 'C': 4}
    """
    remaining = max(0, quantity)
    updated: dict[str, int] = {}
    for location, count in locations.items():
        current = _count(count)
        taken = min(current, remaining)
        updated[location] = current - taken
        remaining -= taken
    return updated


# ---------------------------------------------------------------------------
# Normalized stock variants
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SizeStock:
    """Location counts for one size.

    ``wrapped`` remembers whether the catalog stored the counts under a
    ``stock`` key, so a decrement writes back to the same field path.
    """

    locations: dict[str, int] = field(default_factory=dict)
    wrapped: bool = True

    @property
    def total(self) -> int:
        return sum(self.locations.values())

    def field_path(self, size: str) -> str:
        if self.wrapped:
            return f"talles.{size}.stock"
        return f"talles.{size}"


@dataclass(frozen=True)
class FlatStock:
    """Legacy product without sizes."""

    count: int = 0

    def available(self, size: str | None = None) -> int:
        return self.count

    @property
    def sizes(self) -> list[str]:
        return []


@dataclass(frozen=True)
class SizedStock:
    """Product whose stock is split by size, then by location."""

    by_size: dict[str, SizeStock] = field(default_factory=dict)

    def available(self, size: str | None = None) -> int:
        if size is None:
            return sum(entry.total for entry in self.by_size.values())
        entry = self.by_size.get(size)
        return entry.total if entry is not None else 0

    def locations(self, size: str) -> dict[str, int]:
        entry = self.by_size.get(size)
        return dict(entry.locations) if entry is not None else {}

    @property
    def sizes(self) -> list[str]:
        return list(self.by_size)


def normalize_stock(product: Mapping[str, Any]) -> FlatStock | SizedStock:
    """Read the stock representation of a catalog record into one variant."""
    talles = product.get("talles")
    if not isinstance(talles, Mapping):
        return FlatStock(_count(product.get("stock")))

    by_size: dict[str, SizeStock] = {}
    for key, entry in talles.items():
        if key in RESERVED_SIZE_KEYS:
            continue
        wrapped = isinstance(entry, Mapping) and isinstance(entry.get("stock"), Mapping)
        by_size[str(key)] = SizeStock(
            locations={
                str(location): _count(count)
                for location, count in _locations_of(entry).items()
            },
            wrapped=wrapped or not isinstance(entry, Mapping),
        )
    return SizedStock(by_size)
