"""Product DRF serializers for API input/output.

The serializer operates at the Interface layer (API Views).
Business logic lives in the Service Layer, which receives
Pydantic DTOs from ``dtos.py``.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.products.models import Product


class ProductSerializer(serializers.ModelSerializer):
    """Read-only representation of the Product resource."""

    enterprise_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "description",
            "price",
            "stock",
            "enterprise_id",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "name",
            "description",
            "price",
            "stock",
            "created_at",
            "updated_at",
        ]


class StockAdjustmentSerializer(serializers.Serializer):
    """Input for ``PATCH /products/{id}/stock/`` (documentation only)."""

    delta = serializers.IntegerField()
    reason = serializers.CharField(required=False, allow_blank=True, max_length=255)
