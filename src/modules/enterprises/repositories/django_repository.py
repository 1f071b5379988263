"""Django ORM implementation of the Enterprise repository."""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction

from modules.enterprises.models import Enterprise
from modules.enterprises.repositories.interfaces import IEnterpriseRepository

logger = structlog.get_logger(__name__)


class EnterpriseDjangoRepository(IEnterpriseRepository):
    """Concrete Enterprise repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[Enterprise]:
        try:
            return Enterprise.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def exists(self, id: str) -> bool:
        try:
            return Enterprise.objects.filter(id=id).exists()
        except (ValueError, ValidationError):
            return False

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Enterprise]:
        queryset = Enterprise.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    @transaction.atomic
    def save(self, entity: Enterprise) -> Enterprise:
        entity.save()
        logger.info("enterprise.saved", enterprise_id=str(entity.id))
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        enterprise = self.get_by_id(id)
        if not enterprise:
            return False
        enterprise.delete()
        logger.info("enterprise.deleted", enterprise_id=str(id))
        return True

    def get_by_cnpj(self, cnpj: str) -> Optional[Enterprise]:
        return Enterprise.objects.filter(cnpj=re.sub(r"\D", "", cnpj)).first()
