"""Abstract local key-value slot the cart is mirrored into.

Values are opaque strings. Listeners hear about writes made through
*other* handles on the same storage, never about their own writes, the
way a browser tab is notified only of changes made by other tabs.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable

StorageListener = Callable[[str, "str | None"], None]


class CartStorage(ABC):

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored value, or None if the slot is empty."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store *value* and notify listeners on other handles."""

    @abstractmethod
    def subscribe(self, listener: StorageListener) -> Callable[[], None]:
        """Register *listener*; returns a callable that unsubscribes it."""
