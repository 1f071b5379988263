"""Customer persistence port."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.customers.models import Customer


class ICustomerRepository(IRepository["Customer"]):
    @abstractmethod
    def get_by_email(self, email: str) -> Optional[Customer]:
        """Case-insensitive match on the stored email."""
