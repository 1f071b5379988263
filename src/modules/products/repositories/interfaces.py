"""Product repository interface.

Extends ``IRepository[Product]`` with the locked read and the guarded
stock write the stock ledger is built on.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.products.models import Product


class IProductRepository(IRepository["Product"]):
    """Repository contract for the Product aggregate."""

    @abstractmethod
    def get_many(self, ids: Iterable[str]) -> Dict[str, Product]:
        """Bulk look-up keyed by ``str(product.id)``; unknown ids are absent."""

    @abstractmethod
    def get_for_update(self, id: str) -> Optional[Product]:
        """Retrieve a product with a row-level lock (SELECT FOR UPDATE).

        Used by the stock ledger for the read-modify-write of ``stock``.
        Returns ``None`` if the product does not exist.
        """

    @abstractmethod
    def apply_stock_delta(self, id: str, delta: int, upper_bound: int) -> bool:
        """Add ``delta`` to stock only if the result stays in ``[0, upper_bound]``.

        Returns ``False`` when the guard rejected the write (no row changed).
        """

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Product]:
        """List products with optional filters."""
