"""Domain events for the Orders bounded context."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class OrderCreated(DomainEvent):
    """Raised when an order is created."""

    order_number: str = ""
    total_amount: str = "0.00"


@dataclass(frozen=True)
class OrderUpdated(DomainEvent):
    """Raised when fields other than the status change."""

    changed_fields: tuple = ()


@dataclass(frozen=True)
class OrderStatusChanged(DomainEvent):
    """Raised when an order status changes."""

    old_status: Optional[str] = None
    new_status: str = ""


@dataclass(frozen=True)
class OrderCancelled(DomainEvent):
    """Raised when an order is cancelled and its stock released."""

    released_items: int = 0


@dataclass(frozen=True)
class OrderDeleted(DomainEvent):
    """Raised when an order is hard-deleted."""

    order_number: str = ""
    stock_released: bool = False
