"""Stock ledger: ``Product.stock`` as a bounded, atomically updated counter.

Every write follows the same protocol:

1. lock the product row (``SELECT ... FOR UPDATE``) and compute
   ``current + delta``, rejecting results outside ``[0, STOCK_MAX]``;
2. write with a conditional ``UPDATE`` that re-checks the bound in its
   ``WHERE`` clause.

Step 2 is the authoritative guard: on backends without row locks (SQLite)
step 1 is only an optimistic pre-check, and a concurrent writer that slipped
in between is caught when the guarded update touches no row.

The ledger never opens a transaction for ``apply_delta``/``reserve``/
``release``; callers run them inside their own unit of work so a later
failure rolls the delta back.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

import structlog

from modules.products.events import StockAdjusted
from modules.products.exceptions import (
    InsufficientStock,
    InvalidStockDelta,
    ProductNotFound,
    StockLimitExceeded,
)
from modules.products.models import STOCK_MAX

if TYPE_CHECKING:
    from modules.core.unit_of_work import IUnitOfWork
    from modules.products.models import Product
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


def _prefix(label: Optional[str]) -> str:
    return f"{label}: " if label else ""


class StockLedger:
    """Reserve, release and adjust product stock.

    ``label`` (e.g. ``"Item 2"``) prefixes error messages so a caller
    processing several order items can tell which one failed.
    """

    def __init__(self, repository: IProductRepository, uow: IUnitOfWork) -> None:
        self._repo = repository
        self._uow = uow

    def apply_delta(
        self, product_id: str, delta: int, label: Optional[str] = None
    ) -> int:
        """Apply ``delta`` to the product's stock and return the new value.

        Raises:
            InvalidStockDelta: ``delta`` is zero or not an ``int``.
            ProductNotFound: no such product.
            InsufficientStock: the result would be negative.
            StockLimitExceeded: the result would exceed ``STOCK_MAX``.
        """
        if isinstance(delta, bool) or not isinstance(delta, int) or delta == 0:
            raise InvalidStockDelta(
                f"{_prefix(label)}stock delta must be a non-zero integer, got {delta!r}",
                field="quantity",
            )

        product = self._repo.get_for_update(product_id)
        if product is None:
            raise ProductNotFound(
                f"{_prefix(label)}product {product_id} not found", field="product_id"
            )

        self._check_bounds(product, product.stock, delta, label)
        if not self._repo.apply_stock_delta(product_id, delta, STOCK_MAX):
            # Lost a race against another writer; report against the fresh value.
            product = self._repo.get_by_id(product_id)
            if product is None:
                raise ProductNotFound(
                    f"{_prefix(label)}product {product_id} not found",
                    field="product_id",
                )
            self._check_bounds(product, product.stock, delta, label)
            raise InsufficientStock(
                f"{_prefix(label)}stock for {product.name} changed concurrently",
                field="quantity",
            )

        new_stock = product.stock + delta
        logger.info(
            "stock.delta_applied",
            product_id=str(product_id),
            delta=delta,
            stock=new_stock,
        )
        return new_stock

    def reserve(self, product_id: str, quantity: int, label: Optional[str] = None) -> int:
        """Take ``quantity`` units out of stock for an order."""
        self._ensure_quantity(quantity, label)
        return self.apply_delta(product_id, -quantity, label=label)

    def release(self, product_id: str, quantity: int, label: Optional[str] = None) -> int:
        """Give ``quantity`` units back, e.g. when an order is cancelled."""
        self._ensure_quantity(quantity, label)
        return self.apply_delta(product_id, quantity, label=label)

    def adjust(self, product_id: str, delta: int, reason: str = "") -> Product:
        """Manual restock (positive) or write-off (negative) in its own unit of work.

        Records a ``StockAdjusted`` event in the outbox.
        """
        with self._uow.begin():
            new_stock = self.apply_delta(product_id, delta)
            product = self._repo.get_by_id(product_id)
            product.add_domain_event(
                StockAdjusted(
                    aggregate_id=product.id,
                    delta=delta,
                    stock=new_stock,
                    reason=reason,
                )
            )
            self._repo.save(product)
        logger.info(
            "stock.adjusted",
            product_id=str(product_id),
            delta=delta,
            stock=new_stock,
            reason=reason,
        )
        return product

    # ------------------------------------------------------------------
    # Guards
    # ------------------------------------------------------------------

    @staticmethod
    def _ensure_quantity(quantity: int, label: Optional[str]) -> None:
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise InvalidStockDelta(
                f"{_prefix(label)}quantity must be a positive integer, got {quantity!r}",
                field="quantity",
            )

    @staticmethod
    def _check_bounds(
        product: Product, current: int, delta: int, label: Optional[str]
    ) -> None:
        new_stock = current + delta
        if new_stock < 0:
            logger.warning(
                "stock.insufficient",
                product_id=str(product.id),
                available=current,
                requested=-delta,
            )
            raise InsufficientStock(
                f"{_prefix(label)}insufficient stock for {product.name} "
                f"(available {current}, requested {-delta})",
                field="quantity",
            )
        if new_stock > STOCK_MAX:
            raise StockLimitExceeded(
                f"{_prefix(label)}stock for {product.name} would exceed {STOCK_MAX} "
                f"(current {current}, delta {delta})",
                field="quantity",
            )
