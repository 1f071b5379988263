"""Order submission validator.

Pure decision logic: given a submission and a read-only ``CatalogReader``,
accept it or raise the first failure found.  Nothing is written here; the
stock ledger re-checks availability at write time.

Checks run in a fixed order and fail fast:

1. customer and enterprise exist
2. items non-empty, no duplicate products
3. per-item bounds (quantity, prices, product name)
4. aggregate quantity cap
5. per-item arithmetic (``subtotal == quantity * unit_price``)
6. catalog cross-check (existence, ownership, price, name, stock)
7. total equals the sum of subtotals
8. business floors (minimum total, order date, order number)

Per-item failures are prefixed ``Item N:`` (1-based) and carry the field
path ``items[N-1].<field>``.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Callable, Dict, Iterable, Mapping, Optional, Sequence
from uuid import UUID

import structlog
from django.conf import settings
from django.utils import timezone

from modules.core.exceptions import DomainError
from modules.customers.exceptions import CustomerNotFound
from modules.enterprises.exceptions import EnterpriseNotFound
from modules.orders.constants import (
    MAX_ITEM_QUANTITY,
    MAX_TOTAL_QUANTITY,
    MONEY_TOLERANCE,
    ORDER_NUMBER_MAX_LENGTH,
    ORDER_NUMBER_PATTERN,
    PRODUCT_NAME_MAX_LENGTH,
)
from modules.orders.exceptions import DuplicateOrderNumber, InvalidOrder
from modules.products.exceptions import InsufficientStock, ProductNotFound

if TYPE_CHECKING:
    from modules.orders.catalog import CatalogReader, ProductSnapshot
    from modules.orders.dtos import CreateOrderDTO, OrderItemDTO

logger = structlog.get_logger(__name__)

CENT = Decimal("0.01")


def amounts_match(a: Decimal, b: Decimal) -> bool:
    """Two amounts agree when they differ by strictly less than one cent."""
    return abs(Decimal(a) - Decimal(b)) < MONEY_TOLERANCE


def _money(value: Decimal) -> str:
    return str(Decimal(value).quantize(CENT))


def _item(index: int) -> str:
    return f"Item {index + 1}"


def _field(index: int, name: str) -> str:
    return f"items[{index}].{name}"


class OrderValidator:
    """Validates order submissions against the catalog.

    ``min_total`` defaults to ``settings.ORDER_MIN_TOTAL``; ``today`` to the
    current local date.  Both are injectable for tests.
    """

    def __init__(
        self,
        catalog: CatalogReader,
        min_total: Optional[Decimal] = None,
        today: Optional[Callable[[], date]] = None,
    ) -> None:
        self._catalog = catalog
        self._min_total = (
            Decimal(min_total)
            if min_total is not None
            else Decimal(getattr(settings, "ORDER_MIN_TOTAL", "5.00"))
        )
        self._today = today or timezone.localdate

    @property
    def min_total(self) -> Decimal:
        return self._min_total

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def validate_submission(self, dto: CreateOrderDTO) -> Dict[str, ProductSnapshot]:
        """Run all eight checks against a new order.

        Returns the catalog snapshots of the ordered products keyed by
        ``str(product_id)``.
        """
        log = logger.bind(order_number=dto.order_number)
        try:
            self.check_references(dto.customer_id, dto.enterprise_id)
            snapshots = self.validate_items(dto.items, dto.enterprise_id)
            self.check_total(dto.items, dto.total_amount)
            self.check_minimum_total(dto.total_amount)
            self.check_order_date(dto.order_date)
            self.check_order_number(dto.order_number)
        except DomainError as exc:
            log.info(
                "order.validation_failed",
                error=type(exc).__name__,
                detail=str(exc),
            )
            raise
        return snapshots

    def validate_items(
        self,
        items: Sequence[OrderItemDTO],
        enterprise_id: UUID | str,
        reserved: Optional[Mapping[str, int]] = None,
    ) -> Dict[str, ProductSnapshot]:
        """Checks 2 to 6 over one item set.

        ``reserved`` maps product ids to units already held by the order
        being edited; they count as available when checking stock.
        """
        self._check_item_set(items)
        for index, item in enumerate(items):
            self._check_item_bounds(index, item)
        self._check_total_quantity(items)
        for index, item in enumerate(items):
            self._check_item_arithmetic(index, item)
        return self._check_against_catalog(items, enterprise_id, reserved or {})

    # ------------------------------------------------------------------
    # Individual checks
    # ------------------------------------------------------------------

    def check_references(
        self, customer_id: UUID | str | None, enterprise_id: UUID | str | None
    ) -> None:
        if customer_id is not None and not self._catalog.customer_exists(customer_id):
            raise CustomerNotFound(
                f"Customer {customer_id} not found", field="customer_id"
            )
        if enterprise_id is not None and not self._catalog.enterprise_exists(
            enterprise_id
        ):
            raise EnterpriseNotFound(
                f"Enterprise {enterprise_id} not found", field="enterprise_id"
            )

    def check_total(self, items: Iterable[OrderItemDTO], total: Decimal) -> None:
        computed = sum((item.subtotal for item in items), Decimal("0"))
        if not amounts_match(computed, total):
            raise InvalidOrder(
                f"Total mismatch: items sum to {_money(computed)}, "
                f"submitted {_money(total)}",
                field="total_amount",
            )

    def check_minimum_total(self, total: Decimal) -> None:
        if total < self._min_total:
            raise InvalidOrder(
                f"Order total {_money(total)} is below the minimum of "
                f"{_money(self._min_total)}",
                field="total_amount",
            )

    def check_order_date(self, order_date: date) -> None:
        if order_date > self._today():
            raise InvalidOrder(
                f"Order date {order_date.isoformat()} cannot be in the future",
                field="order_date",
            )

    def check_order_number(
        self, order_number: str, exclude_id: UUID | str | None = None
    ) -> None:
        """Format checks, then uniqueness (``exclude_id`` skips the order itself)."""
        if not order_number or not order_number.strip():
            raise InvalidOrder("Order number is required", field="order_number")
        if len(order_number) > ORDER_NUMBER_MAX_LENGTH:
            raise InvalidOrder(
                f"Order number cannot exceed {ORDER_NUMBER_MAX_LENGTH} characters",
                field="order_number",
            )
        if not ORDER_NUMBER_PATTERN.match(order_number):
            raise InvalidOrder(
                "Order number may only contain letters, digits and hyphens",
                field="order_number",
            )
        if self._catalog.order_number_exists(order_number, exclude_id=exclude_id):
            raise DuplicateOrderNumber(
                f"Order number {order_number} already exists", field="order_number"
            )

    def check_products_belong(
        self, product_ids: Iterable[UUID | str], enterprise_id: UUID | str
    ) -> None:
        """Every product must belong to ``enterprise_id`` (enterprise change on update)."""
        ids = list(product_ids)
        snapshots = self._catalog.get_products(ids)
        for index, product_id in enumerate(ids):
            snapshot = snapshots.get(str(product_id))
            if snapshot is None:
                raise ProductNotFound(
                    f"{_item(index)}: product {product_id} not found",
                    field=_field(index, "product_id"),
                )
            if str(snapshot.enterprise_id) != str(enterprise_id):
                raise InvalidOrder(
                    f"{_item(index)}: product {snapshot.name} does not belong to "
                    f"enterprise {enterprise_id}",
                    field=_field(index, "product_id"),
                )

    # ------------------------------------------------------------------
    # Item checks
    # ------------------------------------------------------------------

    @staticmethod
    def _check_item_set(items: Sequence[OrderItemDTO]) -> None:
        if not items:
            raise InvalidOrder("Order must have at least one item", field="items")
        seen = set()
        for index, item in enumerate(items):
            if item.product_id in seen:
                raise InvalidOrder(
                    f"{_item(index)}: product {item.product_id} appears more than "
                    "once in the order",
                    field=_field(index, "product_id"),
                )
            seen.add(item.product_id)

    @staticmethod
    def _check_item_bounds(index: int, item: OrderItemDTO) -> None:
        prefix = _item(index)
        if not 1 <= item.quantity <= MAX_ITEM_QUANTITY:
            raise InvalidOrder(
                f"{prefix}: quantity must be between 1 and {MAX_ITEM_QUANTITY} "
                f"(got {item.quantity})",
                field=_field(index, "quantity"),
            )
        if item.unit_price < 0:
            raise InvalidOrder(
                f"{prefix}: unit price cannot be negative",
                field=_field(index, "unit_price"),
            )
        if item.subtotal < 0:
            raise InvalidOrder(
                f"{prefix}: subtotal cannot be negative",
                field=_field(index, "subtotal"),
            )
        if not item.product_name or not item.product_name.strip():
            raise InvalidOrder(
                f"{prefix}: product name is required",
                field=_field(index, "product_name"),
            )
        if len(item.product_name) > PRODUCT_NAME_MAX_LENGTH:
            raise InvalidOrder(
                f"{prefix}: product name cannot exceed "
                f"{PRODUCT_NAME_MAX_LENGTH} characters",
                field=_field(index, "product_name"),
            )

    @staticmethod
    def _check_total_quantity(items: Sequence[OrderItemDTO]) -> None:
        total_quantity = sum(item.quantity for item in items)
        if total_quantity > MAX_TOTAL_QUANTITY:
            raise InvalidOrder(
                f"Total quantity cannot exceed {MAX_TOTAL_QUANTITY} "
                f"(got {total_quantity})",
                field="items",
            )

    @staticmethod
    def _check_item_arithmetic(index: int, item: OrderItemDTO) -> None:
        expected = item.quantity * item.unit_price
        if not amounts_match(item.subtotal, expected):
            raise InvalidOrder(
                f"{_item(index)}: subtotal mismatch (expected {_money(expected)}, "
                f"got {_money(item.subtotal)})",
                field=_field(index, "subtotal"),
            )

    def _check_against_catalog(
        self,
        items: Sequence[OrderItemDTO],
        enterprise_id: UUID | str,
        reserved: Mapping[str, int],
    ) -> Dict[str, ProductSnapshot]:
        snapshots = self._catalog.get_products(item.product_id for item in items)
        for index, item in enumerate(items):
            prefix = _item(index)
            snapshot = snapshots.get(str(item.product_id))
            if snapshot is None:
                raise ProductNotFound(
                    f"{prefix}: product {item.product_id} not found",
                    field=_field(index, "product_id"),
                )
            if str(snapshot.enterprise_id) != str(enterprise_id):
                raise InvalidOrder(
                    f"{prefix}: product {snapshot.name} does not belong to "
                    f"enterprise {enterprise_id}",
                    field=_field(index, "product_id"),
                )
            if not amounts_match(item.unit_price, snapshot.price):
                raise InvalidOrder(
                    f"{prefix}: price mismatch for {snapshot.name} "
                    f"(catalog {_money(snapshot.price)}, "
                    f"submitted {_money(item.unit_price)})",
                    field=_field(index, "unit_price"),
                )
            if item.product_name != snapshot.name:
                raise InvalidOrder(
                    f"{prefix}: name mismatch (catalog {snapshot.name!r}, "
                    f"submitted {item.product_name!r})",
                    field=_field(index, "product_name"),
                )
            available = snapshot.stock + reserved.get(str(item.product_id), 0)
            if available < item.quantity:
                raise InsufficientStock(
                    f"{prefix}: insufficient stock for {snapshot.name} "
                    f"(available {available}, requested {item.quantity})",
                    field=_field(index, "quantity"),
                )
        return snapshots
