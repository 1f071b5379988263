"""Django ORM implementation of the Customer repository.

Look-ups return ``None``/``False`` for unknown or malformed ids; the caller
(usually the order catalog reader) turns that into ``CustomerNotFound``.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction

from modules.customers.models import Customer
from modules.customers.repositories.interfaces import ICustomerRepository

logger = structlog.get_logger(__name__)


class CustomerDjangoRepository(ICustomerRepository):
    def get_by_id(self, id: str) -> Optional[Customer]:
        try:
            return Customer.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def exists(self, id: str) -> bool:
        try:
            return Customer.objects.filter(id=id).exists()
        except (ValueError, ValidationError):
            return False

    def get_by_email(self, email: str) -> Optional[Customer]:
        return Customer.objects.filter(email__iexact=email.strip()).first()

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Customer]:
        return list(Customer.objects.filter(**(filters or {})))

    @transaction.atomic
    def save(self, entity: Customer) -> Customer:
        created = entity._state.adding
        entity.save()
        logger.info("customer.saved", customer_id=str(entity.id), created=created)
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        """``ProtectedError`` propagates when the customer still has orders."""
        customer = self.get_by_id(id)
        if customer is None:
            return False
        customer.delete()
        logger.info("customer.deleted", customer_id=str(id))
        return True
