"""Enterprise repository interface."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.enterprises.models import Enterprise


class IEnterpriseRepository(IRepository["Enterprise"]):
    """Repository contract for the Enterprise aggregate."""

    @abstractmethod
    def get_by_cnpj(self, cnpj: str) -> Optional[Enterprise]:
        """Retrieve an enterprise by CNPJ (digits only)."""
