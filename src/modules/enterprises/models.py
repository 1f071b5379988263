"""Enterprise (merchant) model with CNPJ validation.

An enterprise owns products and receives orders.  Both relations are
``PROTECT`` on the child side: an enterprise with catalog or order history
cannot be removed.
"""

from __future__ import annotations

import re

import structlog
from validate_docbr import CNPJ

from django.core.exceptions import ValidationError
from django.db import models

from modules.core.models import BaseModel

logger = structlog.get_logger(__name__)


class Enterprise(BaseModel):
    legal_name = models.CharField(max_length=255)
    trade_name = models.CharField(max_length=255, blank=True, default="")
    cnpj = models.CharField(max_length=14, unique=True)
    foundation_date = models.DateField(null=True, blank=True)
    address = models.TextField(blank=True, default="")

    class Meta:
        db_table = "enterprises"
        ordering = ["legal_name"]

    def clean(self) -> None:
        super().clean()
        if self.cnpj:
            self.cnpj = re.sub(r"\D", "", self.cnpj)
        if not CNPJ().validate(self.cnpj or ""):
            logger.warning(
                "enterprise.invalid_cnpj",
                cnpj_suffix=self.cnpj[-4:] if self.cnpj else "",
            )
            raise ValidationError({"cnpj": "Invalid CNPJ number."})

    def save(self, *args, **kwargs) -> None:
        if self.cnpj:
            self.cnpj = re.sub(r"\D", "", self.cnpj)
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return self.trade_name or self.legal_name
