"""Order status lifecycle.

``pending`` is the only non-terminal state; it may move to ``completed`` or
``cancelled``.  Terminal orders accept no transition and no edit.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from modules.orders.constants import TERMINAL_STATES, VALID_TRANSITIONS
from modules.orders.exceptions import InvalidOrderStatus, OrderLocked

if TYPE_CHECKING:
    from modules.orders.models import Order

logger = structlog.get_logger(__name__)


class OrderStateMachine:
    @staticmethod
    def can_transition(current: str, target: str) -> bool:
        return target in VALID_TRANSITIONS.get(current, set())

    def ensure_mutable(self, order: Order) -> None:
        """Reject any edit of a completed or cancelled order."""
        if order.status in TERMINAL_STATES:
            logger.warning(
                "order.edit_rejected", order_id=str(order.id), status=order.status
            )
            raise OrderLocked(
                f"Order {order.order_number} is {order.status} and cannot be modified",
                field="status",
            )

    def ensure_transition(self, current: str, target: str) -> None:
        if not self.can_transition(current, target):
            logger.warning("order.invalid_transition", current=current, target=target)
            raise InvalidOrderStatus(
                f"Cannot transition order from {current} to {target}",
                field="status",
            )

    def transition(self, order: Order, target: str) -> str:
        """Move ``order`` to ``target`` in memory and return the previous status."""
        self.ensure_transition(order.status, target)
        previous = order.status
        order.status = target
        return previous
