"""CheckoutAttempt — state of one run of the settlement procedure.

    IDLE -> VALIDATING -> ORDER_CREATING -> STOCK_DECREMENTING -> SETTLED
                 |              |                  |
                 +--------------+------------------+--> FAILED

Each attempt starts fresh in IDLE. A FAILED attempt is terminal; there is
no resume, the shopper starts a new attempt with whatever is left in the
cart. A failure after ORDER_CREATING keeps the order id, because the order
record already exists at that point.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from storefront.domain.exceptions import ValidationError


class CheckoutState(Enum):
    IDLE = "IDLE"
    VALIDATING = "VALIDATING"
    ORDER_CREATING = "ORDER_CREATING"
    STOCK_DECREMENTING = "STOCK_DECREMENTING"
    SETTLED = "SETTLED"
    FAILED = "FAILED"


_TRANSITIONS = {
    CheckoutState.IDLE: {CheckoutState.VALIDATING, CheckoutState.FAILED},
    CheckoutState.VALIDATING: {CheckoutState.ORDER_CREATING, CheckoutState.FAILED},
    CheckoutState.ORDER_CREATING: {CheckoutState.STOCK_DECREMENTING, CheckoutState.FAILED},
    CheckoutState.STOCK_DECREMENTING: {CheckoutState.SETTLED, CheckoutState.FAILED},
    CheckoutState.SETTLED: set(),
    CheckoutState.FAILED: set(),
}


@dataclass
class CheckoutAttempt:
    state: CheckoutState = CheckoutState.IDLE
    order_id: str | None = None
    reason: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.state in (CheckoutState.SETTLED, CheckoutState.FAILED)

    # --- State transitions ----------------------------------------------------

    def start_validation(self) -> None:
        self._move_to(CheckoutState.VALIDATING)

    def start_order_creation(self) -> None:
        self._move_to(CheckoutState.ORDER_CREATING)

    def order_created(self, order_id: str) -> None:
        """Record the stored order and move on to decrementing stock."""
        if self.state != CheckoutState.ORDER_CREATING:
            raise ValidationError(
                f"Cannot record an order in {self.state.value} state"
            )
        self.order_id = order_id
        self._move_to(CheckoutState.STOCK_DECREMENTING)

    def settle(self) -> None:
        self._move_to(CheckoutState.SETTLED)

    def fail(self, reason: str) -> None:
        self._move_to(CheckoutState.FAILED)
        self.reason = reason

    # --- Internal helpers -----------------------------------------------------

    def _move_to(self, target: CheckoutState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise ValidationError(
                f"Cannot move checkout from {self.state.value} to {target.value}"
            )
        self.state = target
