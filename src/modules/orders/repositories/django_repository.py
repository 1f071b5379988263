"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.  Methods run in
the caller's unit of work; the only transaction opened here is the savepoint
around header writes, so a unique-index violation can be translated into
``DuplicateOrderNumber`` without poisoning the outer transaction.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import structlog
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction

from modules.core.outbox import record_domain_events
from modules.orders.exceptions import DuplicateOrderNumber
from modules.orders.models import Order, OrderItem, OrderStatusHistory
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Create (aggregate root + children)
    # ------------------------------------------------------------------

    def create(self, order: Order, items: Sequence[Dict[str, Any]]) -> Order:
        """Insert the header (unique index checked), then the items."""
        self._save_header(order)
        self._insert_items(order, items)
        event_count = record_domain_events(order, topic="orders")
        logger.info(
            "order.persisted",
            order_id=str(order.id),
            item_count=len(items),
            event_count=event_count,
        )
        return order

    def replace_items(self, order: Order, items: Sequence[Dict[str, Any]]) -> None:
        deleted, _ = OrderItem.objects.filter(order_id=order.id).delete()
        self._insert_items(order, items)
        logger.info(
            "order.items_replaced",
            order_id=str(order.id),
            removed=deleted,
            inserted=len(items),
        )

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: str) -> Optional[Order]:
        """Retrieve an order with eager-loaded relations.

        Uses ``select_related`` for the customer and enterprise FKs and
        ``prefetch_related`` for items and status history.  Prevents N+1.

        Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return (
                Order.objects.select_related("customer", "enterprise")
                .prefetch_related("items", "status_history")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: str) -> Optional[Order]:
        """Retrieve an order with a row-level lock (SELECT FOR UPDATE).

        Items are loaded while the row is locked so stock release works on
        the committed item set.  Returns ``None`` for non-existent or
        invalid IDs.
        """
        try:
            return (
                Order.objects.select_for_update(of=("self",))
                .select_related("customer", "enterprise")
                .prefetch_related("items")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def exists(self, id: str) -> bool:
        try:
            return Order.objects.filter(id=id).exists()
        except (ValueError, ValidationError):
            return False

    def exists_by_number(
        self, order_number: str, exclude_id: Optional[str] = None
    ) -> bool:
        queryset = Order.objects.filter(order_number=order_number)
        if exclude_id:
            queryset = queryset.exclude(id=exclude_id)
        return queryset.exists()

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        """List orders with optional filters and eager-loaded relations.

        Supported filter keys include ``status``, ``customer_id``,
        ``enterprise_id`` and ``order_date__range``.
        """
        queryset = Order.objects.select_related(
            "customer", "enterprise"
        ).prefetch_related("items", "status_history")
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    # ------------------------------------------------------------------
    # Save / Delete (IRepository contract)
    # ------------------------------------------------------------------

    def save(self, entity: Order) -> Order:
        """Persist header changes and write pending events to the outbox."""
        self._save_header(entity)
        event_count = record_domain_events(entity, topic="orders")
        logger.info("order.saved", order_id=str(entity.id), event_count=event_count)
        return entity

    def delete(self, id: str) -> bool:
        order = self.get_by_id(id)
        if not order:
            return False
        self.remove(order)
        return True

    def remove(self, order: Order) -> None:
        """Hard-delete an order; items and history go by CASCADE.

        Pending events (e.g. ``OrderDeleted``) are written to the outbox first.
        """
        order_id = order.id
        record_domain_events(order, topic="orders")
        order.delete()
        logger.info("order.deleted", order_id=str(order_id))

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def add_history(
        self,
        order_id: Any,
        new_status: str,
        old_status: Optional[str] = None,
        notes: str = "",
    ) -> OrderStatusHistory:
        history = OrderStatusHistory.objects.create(
            order_id=order_id,
            old_status=old_status,
            new_status=new_status,
            notes=notes,
        )
        logger.info(
            "order.history_added",
            order_id=str(order_id),
            old_status=old_status,
            new_status=new_status,
        )
        return history

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _save_header(order: Order) -> None:
        try:
            with transaction.atomic():
                order.save()
        except IntegrityError as exc:
            if "order_number" not in str(exc):
                raise
            logger.warning("order.duplicate_number", order_number=order.order_number)
            raise DuplicateOrderNumber(
                f"Order number {order.order_number} already exists",
                field="order_number",
            ) from exc

    @staticmethod
    def _insert_items(order: Order, items: Sequence[Dict[str, Any]]) -> None:
        OrderItem.objects.bulk_create(
            [
                OrderItem(
                    order=order,
                    product_id=item["product_id"],
                    product_name=item["product_name"],
                    quantity=item["quantity"],
                    unit_price=item["unit_price"],
                    subtotal=item["subtotal"],
                )
                for item in items
            ]
        )
