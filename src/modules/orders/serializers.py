"""Order DRF serializers for API input/output.

The serializer operates at the Interface layer (API Views): it parses
types only.  Business checks live in ``OrderValidator``, which receives
Pydantic DTOs from ``dtos.py``.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.orders.constants import NOTES_MAX_LENGTH, OrderStatus
from modules.orders.models import Order, OrderItem, OrderStatusHistory

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class OrderItemInputSerializer(serializers.Serializer):
    """Parses a single submitted item."""

    product_id = serializers.UUIDField()
    product_name = serializers.CharField(allow_blank=True, trim_whitespace=False)
    quantity = serializers.IntegerField()
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2)
    subtotal = serializers.DecimalField(max_digits=10, decimal_places=2)


class CreateOrderSerializer(serializers.Serializer):
    """Parses the order creation payload."""

    order_number = serializers.CharField(allow_blank=True)
    order_date = serializers.DateField()
    customer_id = serializers.UUIDField()
    enterprise_id = serializers.UUIDField()
    total_amount = serializers.DecimalField(max_digits=10, decimal_places=2)
    notes = serializers.CharField(
        required=False, default="", allow_blank=True, max_length=NOTES_MAX_LENGTH
    )
    items = OrderItemInputSerializer(many=True, allow_empty=True)


class UpdateOrderSerializer(serializers.Serializer):
    """Parses a partial update; every field is optional."""

    order_number = serializers.CharField(required=False, allow_blank=True)
    order_date = serializers.DateField(required=False)
    status = serializers.ChoiceField(choices=OrderStatus.choices, required=False)
    customer_id = serializers.UUIDField(required=False)
    enterprise_id = serializers.UUIDField(required=False)
    total_amount = serializers.DecimalField(
        max_digits=10, decimal_places=2, required=False
    )
    notes = serializers.CharField(
        required=False, allow_blank=True, max_length=NOTES_MAX_LENGTH
    )
    items = OrderItemInputSerializer(many=True, required=False, allow_empty=True)


class CancelOrderSerializer(serializers.Serializer):
    notes = serializers.CharField(
        required=False, default="", allow_blank=True, max_length=NOTES_MAX_LENGTH
    )


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class OrderItemSerializer(serializers.ModelSerializer):
    """Read serializer for order items with the product snapshot."""

    product_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "product_id",
            "product_name",
            "quantity",
            "unit_price",
            "subtotal",
        ]
        read_only_fields = ["id", "product_name", "quantity", "unit_price", "subtotal"]


class StatusHistorySerializer(serializers.ModelSerializer):
    """Read serializer for order status history records."""

    class Meta:
        model = OrderStatusHistory
        fields = [
            "id",
            "old_status",
            "new_status",
            "notes",
            "created_at",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Read serializer for orders with nested items and history."""

    customer_id = serializers.UUIDField(read_only=True)
    customer_name = serializers.CharField(source="customer.name", read_only=True)
    enterprise_id = serializers.UUIDField(read_only=True)
    enterprise_name = serializers.StringRelatedField(source="enterprise")
    items = OrderItemSerializer(many=True, read_only=True)
    status_history = StatusHistorySerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "order_date",
            "status",
            "customer_id",
            "customer_name",
            "enterprise_id",
            "enterprise_name",
            "total_amount",
            "notes",
            "created_at",
            "updated_at",
            "items",
            "status_history",
        ]
        read_only_fields = [
            "id",
            "order_number",
            "order_date",
            "status",
            "total_amount",
            "notes",
            "created_at",
            "updated_at",
        ]


class OrderListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for order list (no nested relations)."""

    customer_id = serializers.UUIDField(read_only=True)
    enterprise_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "order_date",
            "status",
            "customer_id",
            "enterprise_id",
            "total_amount",
            "created_at",
        ]
        read_only_fields = [
            "id",
            "order_number",
            "order_date",
            "status",
            "total_amount",
            "created_at",
        ]
