"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (DRF Serializers)
and the Service layer.  DTOs are immutable (``frozen=True``).

The DTOs only coerce types.  Bounds, arithmetic and catalog checks belong
to ``OrderValidator`` so that every rejection carries the same item-addressed
message whichever entry point was used.

- ``OrderItemDTO``: one submitted line item.
- ``CreateOrderDTO``: a complete order submission.
- ``UpdateOrderDTO``: a partial update; ``fields_set`` tells which keys
  the caller actually sent.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import FrozenSet, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from modules.orders.constants import NOTES_MAX_LENGTH, OrderStatus


class OrderItemDTO(BaseModel):
    """Immutable DTO for a single submitted order item.

    ``product_name``, ``unit_price`` and ``subtotal`` are what the client
    believes the catalog says; the validator cross-checks them.
    """

    model_config = ConfigDict(frozen=True)

    product_id: UUID
    product_name: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal


class CreateOrderDTO(BaseModel):
    """Immutable DTO for order creation requests."""

    model_config = ConfigDict(frozen=True)

    order_number: str
    order_date: date
    customer_id: UUID
    enterprise_id: UUID
    total_amount: Decimal
    items: List[OrderItemDTO]
    notes: str = Field(default="", max_length=NOTES_MAX_LENGTH)


class UpdateOrderDTO(BaseModel):
    """Immutable DTO for partial order updates.

    ``items``, when present, replaces the whole item collection.
    """

    model_config = ConfigDict(frozen=True)

    order_number: Optional[str] = None
    order_date: Optional[date] = None
    status: Optional[OrderStatus] = None
    customer_id: Optional[UUID] = None
    enterprise_id: Optional[UUID] = None
    total_amount: Optional[Decimal] = None
    items: Optional[List[OrderItemDTO]] = None
    notes: Optional[str] = Field(default=None, max_length=NOTES_MAX_LENGTH)

    @property
    def fields_set(self) -> FrozenSet[str]:
        """Names of the fields explicitly supplied by the caller (non-null)."""
        return frozenset(
            name for name in self.model_fields_set if getattr(self, name) is not None
        )
