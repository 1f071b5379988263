"""Product service layer (Use Cases).

Read access to the catalog plus manual stock adjustments.  Stock writes are
delegated to the ``StockLedger`` so they follow the same locking protocol as
order reservations.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional

import structlog

from modules.products.exceptions import ProductNotFound

if TYPE_CHECKING:
    from modules.products.dtos import StockAdjustmentDTO
    from modules.products.ledger import StockLedger
    from modules.products.models import Product
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductService:
    """Application service for Product use-cases.

    Receives an ``IProductRepository`` and a ``StockLedger`` via
    constructor injection (DIP).
    """

    def __init__(self, repository: IProductRepository, ledger: StockLedger) -> None:
        self._repo = repository
        self._ledger = ledger

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_products(self, filters: Optional[Dict[str, Any]] = None) -> List[Product]:
        """Return a list of products, optionally filtered."""
        return self._repo.list(filters)

    def get_product(self, id: str) -> Product:
        """Retrieve a single product by ID.

        Raises:
            ProductNotFound: if the product does not exist.
        """
        product = self._repo.get_by_id(id)
        if not product:
            raise ProductNotFound(f"Product {id} not found.")
        return product

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def adjust_stock(self, id: str, dto: StockAdjustmentDTO) -> Product:
        """Apply a signed manual stock change.

        Raises:
            ProductNotFound: if the product does not exist.
            InsufficientStock: a write-off larger than the current stock.
            StockLimitExceeded: a restock beyond the ledger's upper bound.
        """
        product = self._ledger.adjust(id, dto.delta, reason=dto.reason)
        logger.info("product.stock_adjusted", product_id=str(id), delta=dto.delta)
        return product
