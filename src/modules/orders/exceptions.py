"""Order domain exceptions.

Raised by the validator, the state machine and the Service Layer.  Each one
subclasses a kind from ``modules.core.exceptions`` so the API layer can
translate it without knowing the precise type.
"""

from __future__ import annotations

from modules.core.exceptions import Conflict, InvalidRequest, NotFound


class OrderNotFound(NotFound):
    """The requested order does not exist."""


class InvalidOrderStatus(InvalidRequest):
    """A status transition outside the state machine was attempted."""


class OrderLocked(InvalidRequest):
    """The order is completed or cancelled and can no longer be edited."""


class OrderNotDeletable(InvalidRequest):
    """Completed orders are never hard-deleted."""


class InvalidOrder(InvalidRequest):
    """A structural, arithmetic or business-rule check on a submission failed."""


class DuplicateOrderNumber(Conflict):
    """Another order already uses this order number."""
