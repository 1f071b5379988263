"""Product model with price and stock bounds.

Business rules implemented:
- Price must be greater than zero.
- Stock is a counter in ``[0, 999999]``; it is only mutated through the
  stock ledger (``modules.products.ledger``).
- A product belongs to exactly one enterprise and may only be ordered
  within that enterprise.

Both bounds are also enforced by database check constraints, the last line
of defence against a stock write that bypasses the ledger.
"""

from __future__ import annotations

from decimal import Decimal

import structlog

from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from modules.core.models import BaseModel
from shared.domain.events import DomainEventMixin

logger = structlog.get_logger(__name__)

STOCK_MAX = 999_999


class Product(DomainEventMixin, BaseModel):
    """Product aggregate root.

    ``stock`` is the only piece of state shared by concurrent order
    placements; see ``StockLedger`` for the write protocol.
    """

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    stock = models.PositiveIntegerField(
        default=0,
        validators=[MaxValueValidator(STOCK_MAX)],
    )
    enterprise = models.ForeignKey(
        "enterprises.Enterprise",
        on_delete=models.PROTECT,
        related_name="products",
    )

    class Meta:
        db_table = "products"
        ordering = ["name"]
        indexes = [
            models.Index(fields=["enterprise", "name"], name="products_ent_name_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gt=0),
                name="products_price_positive",
            ),
            models.CheckConstraint(
                condition=models.Q(stock__gte=0) & models.Q(stock__lte=STOCK_MAX),
                name="products_stock_in_range",
            ),
        ]

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def clean(self) -> None:
        super().clean()
        if self.price is not None and self.price <= 0:
            raise ValidationError({"price": "Price must be greater than zero."})
        if self.stock is not None and not 0 <= self.stock <= STOCK_MAX:
            raise ValidationError(
                {"stock": f"Stock must be between 0 and {STOCK_MAX}."}
            )

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, *args, **kwargs) -> None:
        is_new = self._state.adding
        super().save(*args, **kwargs)
        if is_new:
            logger.info(
                "product_created",
                product_id=str(self.id),
                enterprise_id=str(self.enterprise_id),
                name=self.name,
            )

    def __str__(self) -> str:
        return self.name
