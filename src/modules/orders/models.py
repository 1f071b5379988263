"""Order, OrderItem, and OrderStatusHistory models.

Business rules implemented:
- ``order_number`` is client supplied, unique, ``[A-Za-z0-9-]+`` and at most
  50 characters; the UNIQUE index is the authoritative guard against two
  concurrent submissions with the same number.
- Customer and enterprise FKs use PROTECT to preserve financial history.
- OrderItem snapshots the product name and unit price at order time;
  ``subtotal`` is stored as submitted (the validator checks it equals
  ``quantity * unit_price`` within tolerance).
- Items are owned by the order: replaced wholesale on update and removed by
  CASCADE when the order is deleted.
- Each status change generates a history record.
"""

from __future__ import annotations

from decimal import Decimal

import structlog
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from modules.core.models import BaseModel
from modules.orders.constants import (
    MAX_ITEM_QUANTITY,
    ORDER_NUMBER_MAX_LENGTH,
    PRODUCT_NAME_MAX_LENGTH,
    TERMINAL_STATES,
    OrderStatus,
)
from shared.domain.events import DomainEventMixin

logger = structlog.get_logger(__name__)


class Order(DomainEventMixin, BaseModel):
    """Order aggregate root.

    The UUIDv7 ``id`` is used for all internal references and API look-ups;
    ``order_number`` is the human-readable identifier chosen by the client.
    """

    order_number: models.CharField = models.CharField(
        max_length=ORDER_NUMBER_MAX_LENGTH, unique=True
    )
    order_date: models.DateField = models.DateField()
    status: models.CharField = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )
    customer: models.ForeignKey = models.ForeignKey(
        "customers.Customer",
        on_delete=models.PROTECT,
        related_name="orders",
    )
    enterprise: models.ForeignKey = models.ForeignKey(
        "enterprises.Enterprise",
        on_delete=models.PROTECT,
        related_name="orders",
    )
    total_amount: models.DecimalField = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    notes: models.TextField = models.TextField(blank=True, default="")

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["-created_at"], name="orders_created_idx"),
            models.Index(fields=["customer", "-created_at"], name="orders_customer_idx"),
            models.Index(
                fields=["enterprise", "-created_at"], name="orders_enterprise_idx"
            ),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(total_amount__gte=0),
                name="orders_total_non_negative",
            ),
        ]

    @property
    def is_terminal(self) -> bool:
        """Return ``True`` if the order is completed or cancelled."""
        return self.status in TERMINAL_STATES

    def __str__(self) -> str:
        return f"{self.order_number} ({self.status})"


class OrderItem(BaseModel):
    """Line item linking an Order to a Product.

    ``product_name`` and ``unit_price`` are **snapshots** taken when the
    order was placed; later catalog edits never change them.
    """

    order: models.ForeignKey = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="items",
    )
    product: models.ForeignKey = models.ForeignKey(
        "products.Product",
        on_delete=models.PROTECT,
        related_name="order_items",
    )
    product_name: models.CharField = models.CharField(
        max_length=PRODUCT_NAME_MAX_LENGTH
    )
    quantity: models.PositiveIntegerField = models.PositiveIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(MAX_ITEM_QUANTITY)],
    )
    unit_price: models.DecimalField = models.DecimalField(
        max_digits=10,
        decimal_places=2,
    )
    subtotal: models.DecimalField = models.DecimalField(
        max_digits=10,
        decimal_places=2,
    )

    class Meta:
        db_table = "order_items"
        ordering = ["created_at", "id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1)
                & models.Q(quantity__lte=MAX_ITEM_QUANTITY),
                name="order_items_quantity_in_range",
            ),
            models.UniqueConstraint(
                fields=["order", "product"],
                name="order_items_unique_product",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.product_name} x{self.quantity} (${self.subtotal})"


class OrderStatusHistory(BaseModel):
    """Append-only audit trail for order status transitions.

    ``old_status`` is ``None`` on the record written at creation time.
    History goes away with its order (CASCADE).
    """

    order: models.ForeignKey = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="status_history",
    )
    old_status: models.CharField = models.CharField(  # noqa: DJ01
        max_length=20,
        choices=OrderStatus.choices,
        null=True,
        blank=True,
    )
    new_status: models.CharField = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
    )
    notes: models.TextField = models.TextField(blank=True, default="")

    class Meta:
        db_table = "order_status_history"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(
                fields=["order", "created_at"],
                name="osh_order_created_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.order_id} : {self.old_status} -> {self.new_status}"
