"""Customer model with CPF validation.

Business rules implemented:
- CPF must be unique and pass the checksum (``validate-docbr``).
- Email must be unique.
- Sensitive data (CPF) masked in ``__str__`` and logs.

Customers are referenced by orders through ``customer_id``; an order keeps
its customer alive (``PROTECT``).
"""

from __future__ import annotations

import re

import structlog
from validate_docbr import CPF

from django.core.exceptions import ValidationError
from django.db import models

from modules.core.models import BaseModel

logger = structlog.get_logger(__name__)


class Customer(BaseModel):
    """Person who places orders with an enterprise.

    ``cpf`` stores only digits (sanitised on save).
    """

    name = models.CharField(max_length=255)
    email = models.EmailField(max_length=255, unique=True)
    phone = models.CharField(max_length=20, blank=True, default="")
    cpf = models.CharField(max_length=11, unique=True)
    address = models.TextField(blank=True, default="")

    class Meta:
        db_table = "customers"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["-created_at"], name="customers_created_idx"),
        ]

    @staticmethod
    def _sanitize_document(value: str) -> str:
        """Strip all non-digit characters from a document string."""
        return re.sub(r"\D", "", value)

    def clean(self) -> None:
        super().clean()
        if self.cpf:
            self.cpf = self._sanitize_document(self.cpf)
        if not CPF().validate(self.cpf or ""):
            logger.warning(
                "customer.invalid_cpf",
                cpf_suffix=self.cpf[-4:] if self.cpf else "",
            )
            raise ValidationError({"cpf": "Invalid CPF number."})

    def save(self, *args, **kwargs) -> None:
        if self.cpf:
            self.cpf = self._sanitize_document(self.cpf)
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        suffix = self.cpf[-4:] if self.cpf else "????"
        return f"{self.name} (CPF: ***{suffix})"
