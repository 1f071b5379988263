"""Django ORM implementation of the Product repository.

Satisfies ``IProductRepository`` using Django's QuerySet API.
Error handling follows the Null Object pattern: methods return ``None``
instead of raising, the Service Layer (or the ledger) decides how to
translate a missing entity into a domain error.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

import structlog

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from modules.core.outbox import record_domain_events
from modules.products.models import Product
from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductDjangoRepository(IProductRepository):
    """Concrete Product repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[Product]:
        """Retrieve a product by primary key.

        Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return Product.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def exists(self, id: str) -> bool:
        try:
            return Product.objects.filter(id=id).exists()
        except (ValueError, ValidationError):
            return False

    def get_many(self, ids: Iterable[str]) -> Dict[str, Product]:
        try:
            products = Product.objects.filter(id__in=[str(i) for i in ids])
            return {str(product.id): product for product in products}
        except (ValueError, ValidationError):
            return {}

    def get_for_update(self, id: str) -> Optional[Product]:
        try:
            return Product.objects.select_for_update().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def apply_stock_delta(self, id: str, delta: int, upper_bound: int) -> bool:
        """Single conditional ``UPDATE``; the authoritative over-sell guard.

        The ``WHERE`` clause re-checks the bound at write time, whatever the
        caller read earlier.
        """
        queryset = Product.objects.filter(id=id)
        if delta < 0:
            queryset = queryset.filter(stock__gte=-delta)
        else:
            queryset = queryset.filter(stock__lte=upper_bound - delta)
        updated = queryset.update(stock=F("stock") + delta, updated_at=timezone.now())
        return updated == 1

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Product]:
        """List products with optional Django ORM look-ups.

        Examples of valid filters::

            {"enterprise_id": "0190..."}
            {"name__icontains": "widget"}
        """
        queryset = Product.objects.select_related("enterprise")
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    @transaction.atomic
    def save(self, entity: Product) -> Product:
        """Persist (create or update) a product and its pending events."""
        entity.save()
        event_count = record_domain_events(entity, topic="products")
        logger.info(
            "product.saved",
            product_id=str(entity.id),
            event_count=event_count,
        )
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        """Delete a product by ID (``ProtectedError`` if any order item uses it)."""
        product = self.get_by_id(id)
        if not product:
            return False
        product.delete()
        logger.info("product.deleted", product_id=str(id))
        return True
