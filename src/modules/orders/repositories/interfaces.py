"""Order repository interface.

Extends ``IRepository[Order]`` with the methods the Order aggregate needs:
creation with items, wholesale item replacement, status history,
row locking and order-number look-up.

The Service Layer depends exclusively on this contract (DIP).
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.models import Order, OrderStatusHistory


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root.

    The Order aggregate includes OrderItem children and
    OrderStatusHistory records.  Callers provide the transaction.
    """

    @abstractmethod
    def create(self, order: Order, items: Sequence[Dict[str, Any]]) -> Order:
        """Insert the order header, then its items.

        Each item dict carries ``product_id``, ``product_name``,
        ``quantity``, ``unit_price`` and ``subtotal``.

        Raises ``DuplicateOrderNumber`` when the unique index rejects the
        order number.
        """

    @abstractmethod
    def replace_items(self, order: Order, items: Sequence[Dict[str, Any]]) -> None:
        """Delete every existing item of ``order`` and insert ``items``."""

    @abstractmethod
    def remove(self, order: Order) -> None:
        """Delete a loaded order, recording its pending domain events."""

    @abstractmethod
    def get_for_update(self, id: str) -> Optional[Order]:
        """Retrieve an order with a row-level lock (``None`` if missing)."""

    @abstractmethod
    def add_history(
        self,
        order_id: Any,
        new_status: str,
        old_status: Optional[str] = None,
        notes: str = "",
    ) -> OrderStatusHistory:
        """Record a status change in the order's audit trail."""

    @abstractmethod
    def exists_by_number(
        self, order_number: str, exclude_id: Optional[str] = None
    ) -> bool:
        """Return ``True`` if another order uses ``order_number``."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        """List orders with optional filters."""
