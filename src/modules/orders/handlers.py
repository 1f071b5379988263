"""Event handlers for Orders domain events."""

from __future__ import annotations

import structlog

from modules.orders.events import (
    OrderCancelled,
    OrderCreated,
    OrderDeleted,
    OrderStatusChanged,
    OrderUpdated,
)
from shared.domain.bus import IEventHandler

logger = structlog.get_logger(__name__)


class OrderCreatedHandler(IEventHandler[OrderCreated]):
    def handle(self, event: OrderCreated) -> None:
        logger.info(
            "order.created_event",
            order_id=str(event.aggregate_id),
            order_number=event.order_number,
            total_amount=event.total_amount,
        )


class OrderUpdatedHandler(IEventHandler[OrderUpdated]):
    def handle(self, event: OrderUpdated) -> None:
        logger.info(
            "order.updated_event",
            order_id=str(event.aggregate_id),
            changed_fields=list(event.changed_fields),
        )


class OrderStatusChangedHandler(IEventHandler[OrderStatusChanged]):
    def handle(self, event: OrderStatusChanged) -> None:
        logger.info(
            "order.status_changed_event",
            order_id=str(event.aggregate_id),
            old_status=event.old_status,
            new_status=event.new_status,
        )


class OrderCancelledHandler(IEventHandler[OrderCancelled]):
    def handle(self, event: OrderCancelled) -> None:
        logger.info(
            "order.cancelled_event",
            order_id=str(event.aggregate_id),
            released_items=event.released_items,
        )


class OrderDeletedHandler(IEventHandler[OrderDeleted]):
    def handle(self, event: OrderDeleted) -> None:
        logger.info(
            "order.deleted_event",
            order_id=str(event.aggregate_id),
            order_number=event.order_number,
            stock_released=event.stock_released,
        )


# (event type, handler) pairs wired onto the bus by ``OrdersConfig.ready``.
SUBSCRIPTIONS = (
    (OrderCreated, OrderCreatedHandler()),
    (OrderUpdated, OrderUpdatedHandler()),
    (OrderStatusChanged, OrderStatusChangedHandler()),
    (OrderCancelled, OrderCancelledHandler()),
    (OrderDeleted, OrderDeletedHandler()),
)
