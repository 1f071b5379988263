"""Order service layer (Use Cases).

Orchestrates order placement and stock reconciliation.  ``OrderService``
composes the validator, the stock ledger and the state machine, and owns
the unit-of-work boundary: every write of one use case (header, items,
stock deltas, history, outbox rows) commits or rolls back together.

Validation always completes before the first write.  Inside the unit of
work the database is the authoritative guard for the two race-prone
checks: the conditional stock update (``StockLedger``) and the unique index
on ``order_number`` (``OrderDjangoRepository``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional, Sequence, Tuple
from uuid import UUID

import structlog

from modules.customers.exceptions import CustomerNotFound
from modules.enterprises.exceptions import EnterpriseNotFound
from modules.orders.constants import OrderStatus
from modules.orders.events import (
    OrderCancelled,
    OrderCreated,
    OrderDeleted,
    OrderStatusChanged,
    OrderUpdated,
)
from modules.orders.exceptions import (
    DuplicateOrderNumber,
    OrderNotDeletable,
    OrderNotFound,
)
from modules.orders.models import Order

if TYPE_CHECKING:
    from modules.core.unit_of_work import IUnitOfWork
    from modules.orders.catalog import CatalogReader
    from modules.orders.dtos import CreateOrderDTO, OrderItemDTO, UpdateOrderDTO
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.orders.state_machine import OrderStateMachine
    from modules.orders.validators import OrderValidator
    from modules.products.ledger import StockLedger

logger = structlog.get_logger(__name__)

# (label, product_id, quantity)
StockLine = Tuple[str, Any, int]

_SCALAR_FIELDS = (
    "order_number",
    "order_date",
    "customer_id",
    "enterprise_id",
    "total_amount",
    "notes",
)


def _item_rows(items: Sequence[OrderItemDTO]) -> List[Dict[str, Any]]:
    return [
        {
            "product_id": item.product_id,
            "product_name": item.product_name,
            "quantity": item.quantity,
            "unit_price": item.unit_price,
            "subtotal": item.subtotal,
        }
        for item in items
    ]


def _stock_lines(items: Iterable[Any]) -> List[StockLine]:
    """Label items by position, then sort by product id.

    A fixed lock order across orders keeps two concurrent placements from
    deadlocking on each other's product rows.
    """
    lines = []
    for index, item in enumerate(items):
        if isinstance(item, dict):
            product_id, quantity = item["product_id"], item["quantity"]
        else:
            product_id, quantity = item.product_id, item.quantity
        lines.append((f"Item {index + 1}", product_id, quantity))
    return sorted(lines, key=lambda line: str(line[1]))


class OrderService:
    """Application service for Order use-cases.

    Every collaborator arrives through the constructor (DIP); nothing is
    looked up from module globals.
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        catalog: CatalogReader,
        validator: OrderValidator,
        ledger: StockLedger,
        state_machine: OrderStateMachine,
        uow: IUnitOfWork,
    ) -> None:
        self._orders = order_repository
        self._catalog = catalog
        self._validator = validator
        self._ledger = ledger
        self._state = state_machine
        self._uow = uow

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_order(self, dto: CreateOrderDTO) -> Order:
        """Validate, persist and reserve stock for a new order.

        Steps:
        1. Full validation against a fresh catalog snapshot.
        2. In one unit of work: re-check the order number, insert header
           and items, reserve stock per item (product-id order), record the
           initial history row and the ``OrderCreated`` event.

        Any failure inside step 2 rolls back every write of the call.

        Raises:
            NotFound: customer, enterprise or product missing.
            InvalidRequest: any validation failure, including insufficient
                stock detected at reservation time.
            Conflict: the order number is taken.
        """
        log = logger.bind(
            order_number=dto.order_number,
            customer_id=str(dto.customer_id),
            enterprise_id=str(dto.enterprise_id),
        )
        log.info("order.creation_started", item_count=len(dto.items))

        self._validator.validate_submission(dto)
        rows = _item_rows(dto.items)

        with self._uow.begin():
            if self._catalog.order_number_exists(dto.order_number):
                raise DuplicateOrderNumber(
                    f"Order number {dto.order_number} already exists",
                    field="order_number",
                )

            order = Order(
                order_number=dto.order_number,
                order_date=dto.order_date,
                status=OrderStatus.PENDING,
                customer_id=dto.customer_id,
                enterprise_id=dto.enterprise_id,
                total_amount=dto.total_amount,
                notes=dto.notes,
            )
            order.add_domain_event(
                OrderCreated(
                    aggregate_id=order.id,
                    order_number=order.order_number,
                    total_amount=str(dto.total_amount),
                )
            )
            self._orders.create(order, rows)
            self._reserve(_stock_lines(rows), log)
            self._orders.add_history(
                order.id, OrderStatus.PENDING, old_status=None, notes="Order created"
            )

        log.info("order.created", order_id=str(order.id))
        return self._orders.get_by_id(str(order.id))

    def update_order(self, order_id: UUID | str, dto: UpdateOrderDTO) -> Order:
        """Apply a partial update to a pending order.

        ``items`` replaces the whole collection: old reservations are
        released and the new items reserved in the same unit of work.  A
        transition to ``cancelled`` releases the stock held by the order.

        Raises:
            OrderNotFound: order does not exist.
            OrderLocked: order is completed or cancelled.
            InvalidOrderStatus: the status transition is not allowed, including
                any status change requested on a terminal order.
            NotFound / InvalidRequest / Conflict: re-validation failures.
        """
        fields = dto.fields_set
        log = logger.bind(order_id=str(order_id), fields=sorted(fields))

        with self._uow.begin():
            order = self._load_for_update(order_id)
            if "status" in fields and order.is_terminal:
                self._state.ensure_transition(order.status, dto.status)
            self._state.ensure_mutable(order)

            target = None
            if "status" in fields and dto.status != order.status:
                target = dto.status
                self._state.ensure_transition(order.status, target)

            current_items = list(order.items.all())
            enterprise_id = (
                dto.enterprise_id if "enterprise_id" in fields else order.enterprise_id
            )
            self._validator.check_references(
                dto.customer_id if "customer_id" in fields else None,
                dto.enterprise_id if "enterprise_id" in fields else None,
            )

            new_rows = None
            if "items" in fields:
                reserved: Dict[str, int] = {}
                for item in current_items:
                    reserved[str(item.product_id)] = item.quantity
                self._validator.validate_items(dto.items, enterprise_id, reserved)
                new_rows = _item_rows(dto.items)
            elif str(enterprise_id) != str(order.enterprise_id):
                self._validator.check_products_belong(
                    [item.product_id for item in current_items], enterprise_id
                )

            if "order_number" in fields and dto.order_number != order.order_number:
                self._validator.check_order_number(dto.order_number, exclude_id=order.id)

            if "total_amount" in fields or new_rows is not None:
                total = dto.total_amount if "total_amount" in fields else order.total_amount
                self._validator.check_total(
                    dto.items if new_rows is not None else current_items, total
                )
                self._validator.check_minimum_total(total)

            if "order_date" in fields:
                self._validator.check_order_date(dto.order_date)

            # Validation complete; writes start here.
            changed: List[str] = []
            if new_rows is not None:
                self._release(_stock_lines(current_items), log)
                self._orders.replace_items(order, new_rows)
                if target != OrderStatus.CANCELLED:
                    self._reserve(_stock_lines(new_rows), log)
                changed.append("items")
            elif target == OrderStatus.CANCELLED:
                self._release(_stock_lines(current_items), log)

            for name in _SCALAR_FIELDS:
                if name in fields and getattr(order, name) != getattr(dto, name):
                    setattr(order, name, getattr(dto, name))
                    changed.append(name)

            if changed:
                order.add_domain_event(
                    OrderUpdated(aggregate_id=order.id, changed_fields=tuple(changed))
                )
            if target is not None:
                previous = self._state.transition(order, target)
                self._record_transition(
                    order,
                    previous,
                    notes="Status updated",
                    released_items=len(current_items),
                )
            self._orders.save(order)

        log.info("order.updated", changed=changed, status=order.status)
        return self._orders.get_by_id(str(order.id))

    def cancel_order(self, order_id: UUID | str, notes: str = "") -> Order:
        """Cancel a pending order and release every reserved unit.

        Raises:
            OrderNotFound: order does not exist.
            InvalidOrderStatus: the order is already completed or cancelled.
        """
        log = logger.bind(order_id=str(order_id))

        with self._uow.begin():
            order = self._load_for_update(order_id)
            previous = self._state.transition(order, OrderStatus.CANCELLED)
            items = list(order.items.all())
            self._release(_stock_lines(items), log)
            self._record_transition(
                order,
                previous,
                notes=notes or "Order cancelled",
                released_items=len(items),
            )
            self._orders.save(order)

        log.info("order.cancelled", released_items=len(items))
        return self._orders.get_by_id(str(order.id))

    def delete_order(self, order_id: UUID | str) -> None:
        """Hard-delete a pending or cancelled order.

        A pending order still holds its reservation, so its stock is
        released before the delete; a cancelled one already gave it back.

        Raises:
            OrderNotFound: order does not exist.
            OrderNotDeletable: the order is completed.
        """
        log = logger.bind(order_id=str(order_id))

        with self._uow.begin():
            order = self._load_for_update(order_id)
            if order.status == OrderStatus.COMPLETED:
                log.warning("order.delete_rejected", status=order.status)
                raise OrderNotDeletable(
                    f"Order {order.order_number} is completed and cannot be deleted",
                    field="status",
                )
            released = order.status == OrderStatus.PENDING
            if released:
                self._release(_stock_lines(order.items.all()), log)
            order.add_domain_event(
                OrderDeleted(
                    aggregate_id=order.id,
                    order_number=order.order_number,
                    stock_released=released,
                )
            )
            self._orders.remove(order)

        log.info("order.deleted", stock_released=released)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: UUID | str) -> Order:
        """Retrieve a single order by ID.

        Raises:
            OrderNotFound: if the order does not exist.
        """
        order = self._orders.get_by_id(str(order_id))
        if not order:
            raise OrderNotFound(f"Order {order_id} not found")
        return order

    def list_orders(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        """Return a list of orders, optionally filtered."""
        return self._orders.list(filters)

    def list_orders_by_customer(self, customer_id: UUID | str) -> List[Order]:
        if not self._catalog.customer_exists(customer_id):
            raise CustomerNotFound(
                f"Customer {customer_id} not found", field="customer_id"
            )
        return self._orders.list({"customer_id": customer_id})

    def list_orders_by_enterprise(self, enterprise_id: UUID | str) -> List[Order]:
        if not self._catalog.enterprise_exists(enterprise_id):
            raise EnterpriseNotFound(
                f"Enterprise {enterprise_id} not found", field="enterprise_id"
            )
        return self._orders.list({"enterprise_id": enterprise_id})

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _load_for_update(self, order_id: UUID | str) -> Order:
        order = self._orders.get_for_update(str(order_id))
        if not order:
            raise OrderNotFound(f"Order {order_id} not found")
        return order

    def _reserve(self, lines: Sequence[StockLine], log: Any) -> None:
        for label, product_id, quantity in lines:
            remaining = self._ledger.reserve(str(product_id), quantity, label=label)
            log.info(
                "order.stock_reserved",
                product_id=str(product_id),
                quantity=quantity,
                remaining=remaining,
            )

    def _release(self, lines: Sequence[StockLine], log: Any) -> None:
        for label, product_id, quantity in lines:
            restored = self._ledger.release(str(product_id), quantity, label=label)
            log.info(
                "order.stock_released",
                product_id=str(product_id),
                quantity=quantity,
                restored_stock=restored,
            )

    def _record_transition(
        self, order: Order, previous: str, notes: str, released_items: int = 0
    ) -> None:
        order.add_domain_event(
            OrderStatusChanged(
                aggregate_id=order.id,
                old_status=str(previous),
                new_status=str(order.status),
            )
        )
        if order.status == OrderStatus.CANCELLED:
            order.add_domain_event(
                OrderCancelled(
                    aggregate_id=order.id, released_items=released_items
                )
            )
        self._orders.add_history(
            order.id, order.status, old_status=previous, notes=notes
        )
        logger.info(
            "order.status_changed",
            order_id=str(order.id),
            old_status=previous,
            new_status=order.status,
        )
