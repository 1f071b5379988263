"""Unit tests for ``OrderValidator``.

The catalog is a ``MagicMock`` so every check runs without the database:
- referential existence (customer, enterprise, product)
- item set, bounds, aggregate quantity and arithmetic
- catalog cross-check (ownership, price, name, stock)
- total consistency and business floors
- fail-fast ordering and item-addressed messages
"""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from modules.core.exceptions import Conflict, InvalidRequest, NotFound
from modules.orders.catalog import ProductSnapshot
from modules.orders.dtos import CreateOrderDTO, OrderItemDTO
from modules.orders.validators import OrderValidator, amounts_match

pytestmark = pytest.mark.unit

TODAY = date(2026, 3, 15)
ENTERPRISE_ID = uuid4()


def _snapshot(name="Widget", price="10.00", stock=5, enterprise_id=ENTERPRISE_ID):
    return ProductSnapshot(
        id=uuid4(),
        name=name,
        price=Decimal(price),
        stock=stock,
        enterprise_id=enterprise_id,
    )


def _item(snapshot, quantity=2, unit_price=None, subtotal=None, name=None):
    price = Decimal(unit_price) if unit_price is not None else snapshot.price
    return OrderItemDTO(
        product_id=snapshot.id,
        product_name=snapshot.name if name is None else name,
        quantity=quantity,
        unit_price=price,
        subtotal=Decimal(subtotal) if subtotal is not None else price * quantity,
    )


def _submission(items, total=None, **overrides):
    data = {
        "order_number": "ORD-1",
        "order_date": TODAY,
        "customer_id": uuid4(),
        "enterprise_id": ENTERPRISE_ID,
        "total_amount": (
            Decimal(total)
            if total is not None
            else sum((i.subtotal for i in items), Decimal("0"))
        ),
        "items": items,
    }
    data.update(overrides)
    return CreateOrderDTO(**data)


@pytest.fixture()
def catalog():
    mock = MagicMock()
    mock.customer_exists.return_value = True
    mock.enterprise_exists.return_value = True
    mock.order_number_exists.return_value = False
    mock.products = {}
    mock.get_products.side_effect = lambda ids: {
        str(i): mock.products[str(i)] for i in ids if str(i) in mock.products
    }
    return mock


@pytest.fixture()
def validator(catalog):
    return OrderValidator(catalog, min_total=Decimal("5.00"), today=lambda: TODAY)


def _register(catalog, *snapshots):
    for snapshot in snapshots:
        catalog.products[str(snapshot.id)] = snapshot


# ---------------------------------------------------------------------------
# Happy path
# ---------------------------------------------------------------------------


class TestAcceptedSubmission:
    def test_valid_order_returns_snapshots(self, validator, catalog):
        widget = _snapshot()
        _register(catalog, widget)

        result = validator.validate_submission(_submission([_item(widget)]))

        assert result == {str(widget.id): widget}

    def test_min_total_defaults_to_setting(self, catalog, settings):
        settings.ORDER_MIN_TOTAL = Decimal("12.50")
        assert OrderValidator(catalog).min_total == Decimal("12.50")

    def test_amounts_match_is_strict_at_one_cent(self):
        assert amounts_match(Decimal("20.00"), Decimal("20.009"))
        assert not amounts_match(Decimal("19.99"), Decimal("20.00"))


# ---------------------------------------------------------------------------
# 1. Referential existence
# ---------------------------------------------------------------------------


class TestReferences:
    def test_unknown_customer_is_not_found(self, validator, catalog):
        catalog.customer_exists.return_value = False
        widget = _snapshot()
        _register(catalog, widget)

        with pytest.raises(NotFound) as exc:
            validator.validate_submission(_submission([_item(widget)]))

        assert exc.value.field == "customer_id"

    def test_unknown_enterprise_is_not_found(self, validator, catalog):
        catalog.enterprise_exists.return_value = False
        widget = _snapshot()
        _register(catalog, widget)

        with pytest.raises(NotFound) as exc:
            validator.validate_submission(_submission([_item(widget)]))

        assert exc.value.field == "enterprise_id"

    def test_references_checked_before_items(self, validator, catalog):
        catalog.customer_exists.return_value = False

        with pytest.raises(NotFound):
            validator.validate_submission(_submission([]))


# ---------------------------------------------------------------------------
# 2-5. Structural and arithmetic checks
# ---------------------------------------------------------------------------


class TestItemStructure:
    def test_empty_items_rejected(self, validator):
        with pytest.raises(InvalidRequest, match="at least one item"):
            validator.validate_submission(_submission([], total="10.00"))

    def test_duplicate_products_rejected(self, validator, catalog):
        widget = _snapshot()
        _register(catalog, widget)

        with pytest.raises(InvalidRequest, match="more than once") as exc:
            validator.validate_submission(
                _submission([_item(widget, 1), _item(widget, 1)])
            )

        assert exc.value.field == "items[1].product_id"

    @pytest.mark.parametrize("quantity", [0, -1, 101])
    def test_quantity_out_of_bounds(self, validator, catalog, quantity):
        widget = _snapshot(stock=500)
        _register(catalog, widget)

        with pytest.raises(InvalidRequest, match="Item 1: quantity"):
            validator.validate_submission(
                _submission([_item(widget, quantity)], total="10.00")
            )

    def test_negative_unit_price_rejected(self, validator, catalog):
        widget = _snapshot()
        _register(catalog, widget)

        with pytest.raises(InvalidRequest, match="unit price cannot be negative"):
            validator.validate_submission(
                _submission([_item(widget, 1, unit_price="-1.00", subtotal="0")])
            )

    def test_negative_subtotal_rejected(self, validator, catalog):
        widget = _snapshot()
        _register(catalog, widget)

        with pytest.raises(InvalidRequest, match="subtotal cannot be negative"):
            validator.validate_submission(
                _submission([_item(widget, 1, subtotal="-10.00")], total="10.00")
            )

    def test_blank_product_name_rejected(self, validator, catalog):
        widget = _snapshot()
        _register(catalog, widget)

        with pytest.raises(InvalidRequest, match="product name is required"):
            validator.validate_submission(_submission([_item(widget, name="   ")]))

    def test_overlong_product_name_rejected(self, validator, catalog):
        widget = _snapshot()
        _register(catalog, widget)

        with pytest.raises(InvalidRequest, match="cannot exceed 255"):
            validator.validate_submission(_submission([_item(widget, name="x" * 256)]))

    def test_total_quantity_cap(self, validator, catalog):
        a, b = _snapshot("A", stock=100), _snapshot("B", stock=100)
        _register(catalog, a, b)

        with pytest.raises(InvalidRequest, match="Total quantity cannot exceed 50"):
            validator.validate_submission(_submission([_item(a, 30), _item(b, 21)]))

    def test_total_quantity_of_fifty_is_accepted(self, validator, catalog):
        a, b = _snapshot("A", stock=100), _snapshot("B", stock=100)
        _register(catalog, a, b)

        validator.validate_submission(_submission([_item(a, 30), _item(b, 20)]))

    def test_subtotal_mismatch_names_the_item(self, validator, catalog):
        a, b = _snapshot("A"), _snapshot("B")
        _register(catalog, a, b)

        with pytest.raises(InvalidRequest) as exc:
            validator.validate_submission(
                _submission([_item(a, 1), _item(b, 2, subtotal="19.00")])
            )

        assert str(exc.value).startswith("Item 2: subtotal mismatch")
        assert exc.value.field == "items[1].subtotal"

    def test_subtotal_within_tolerance_is_accepted(self, validator, catalog):
        widget = _snapshot(price="3.33")
        _register(catalog, widget)

        validator.validate_submission(
            _submission([_item(widget, 3, subtotal="9.995")], total="9.995")
        )


# ---------------------------------------------------------------------------
# 6. Catalog cross-check
# ---------------------------------------------------------------------------


class TestCatalogCrossCheck:
    def test_unknown_product_is_not_found(self, validator):
        ghost = _snapshot()

        with pytest.raises(NotFound, match="Item 1: product"):
            validator.validate_submission(_submission([_item(ghost)]))

    def test_product_of_another_enterprise_rejected(self, validator, catalog):
        foreign = _snapshot(enterprise_id=uuid4())
        _register(catalog, foreign)

        with pytest.raises(InvalidRequest, match="does not belong"):
            validator.validate_submission(_submission([_item(foreign)]))

    def test_stale_price_rejected(self, validator, catalog):
        widget = _snapshot(price="10.00")
        _register(catalog, widget)

        with pytest.raises(InvalidRequest, match="price mismatch"):
            validator.validate_submission(
                _submission([_item(widget, 2, unit_price="9.00")])
            )

    def test_spoofed_name_rejected(self, validator, catalog):
        widget = _snapshot(name="Widget")
        _register(catalog, widget)

        with pytest.raises(InvalidRequest, match="name mismatch"):
            validator.validate_submission(_submission([_item(widget, name="widget")]))

    def test_insufficient_stock_reports_available_and_requested(
        self, validator, catalog
    ):
        a, b = _snapshot("A", stock=10), _snapshot("Gadget", stock=3)
        _register(catalog, a, b)

        with pytest.raises(InvalidRequest) as exc:
            validator.validate_submission(_submission([_item(a, 1), _item(b, 5)]))

        assert str(exc.value) == (
            "Item 2: insufficient stock for Gadget (available 3, requested 5)"
        )

    def test_reserved_units_count_as_available(self, validator, catalog):
        widget = _snapshot(stock=1)
        _register(catalog, widget)

        validator.validate_items(
            [_item(widget, 3)], ENTERPRISE_ID, reserved={str(widget.id): 2}
        )


# ---------------------------------------------------------------------------
# 7-8. Totals and business floors
# ---------------------------------------------------------------------------


class TestTotalsAndFloors:
    def test_total_mismatch_rejected(self, validator, catalog):
        widget = _snapshot()
        _register(catalog, widget)

        with pytest.raises(InvalidRequest, match="Total mismatch") as exc:
            validator.validate_submission(_submission([_item(widget)], total="19.99"))

        assert exc.value.field == "total_amount"

    def test_total_below_minimum_rejected(self, validator, catalog):
        widget = _snapshot(price="2.00")
        _register(catalog, widget)

        with pytest.raises(InvalidRequest, match="below the minimum of 5.00"):
            validator.validate_submission(_submission([_item(widget, 2)]))

    def test_total_equal_to_minimum_accepted(self, validator, catalog):
        widget = _snapshot(price="2.50")
        _register(catalog, widget)

        validator.validate_submission(_submission([_item(widget, 2)]))

    def test_future_order_date_rejected(self, validator, catalog):
        widget = _snapshot()
        _register(catalog, widget)

        with pytest.raises(InvalidRequest, match="cannot be in the future"):
            validator.validate_submission(
                _submission([_item(widget)], order_date=TODAY + timedelta(days=1))
            )

    def test_today_is_accepted(self, validator, catalog):
        widget = _snapshot()
        _register(catalog, widget)

        validator.validate_submission(_submission([_item(widget)], order_date=TODAY))

    @pytest.mark.parametrize(
        "order_number, message",
        [
            ("", "required"),
            ("   ", "required"),
            ("A" * 51, "cannot exceed 50"),
            ("ORD 1", "letters, digits and hyphens"),
            ("ORD_1", "letters, digits and hyphens"),
        ],
    )
    def test_malformed_order_number_rejected(
        self, validator, catalog, order_number, message
    ):
        widget = _snapshot()
        _register(catalog, widget)

        with pytest.raises(InvalidRequest, match=message):
            validator.validate_submission(
                _submission([_item(widget)], order_number=order_number)
            )

    def test_taken_order_number_is_conflict(self, validator, catalog):
        catalog.order_number_exists.return_value = True
        widget = _snapshot()
        _register(catalog, widget)

        with pytest.raises(Conflict):
            validator.validate_submission(_submission([_item(widget)]))

    def test_order_number_uniqueness_excludes_self(self, validator, catalog):
        order_id = uuid4()

        validator.check_order_number("ORD-9", exclude_id=order_id)

        catalog.order_number_exists.assert_called_once_with(
            "ORD-9", exclude_id=order_id
        )


class TestIdempotentRejection:
    def test_same_invalid_submission_fails_the_same_way_twice(
        self, validator, catalog
    ):
        widget = _snapshot(stock=1)
        _register(catalog, widget)
        dto = _submission([_item(widget, 2)])

        errors = []
        for _ in range(2):
            with pytest.raises(InvalidRequest) as exc:
                validator.validate_submission(dto)
            errors.append((type(exc.value), str(exc.value)))

        assert errors[0] == errors[1]
