from __future__ import annotations

from types import SimpleNamespace
from uuid import uuid4

import pytest

from modules.orders.constants import OrderStatus
from modules.orders.exceptions import InvalidOrderStatus, OrderLocked
from modules.orders.models import Order
from modules.orders.state_machine import OrderStateMachine

pytestmark = pytest.mark.unit

ALL = list(OrderStatus)


def _order(status):
    return SimpleNamespace(id=uuid4(), order_number="ORD-1", status=status)


class TestTransitionTable:
    @pytest.mark.parametrize("target", [OrderStatus.COMPLETED, OrderStatus.CANCELLED])
    def test_pending_moves_to_terminal_states(self, target):
        assert OrderStateMachine.can_transition(OrderStatus.PENDING, target)

    def test_pending_to_pending_is_not_a_transition(self):
        assert not OrderStateMachine.can_transition(
            OrderStatus.PENDING, OrderStatus.PENDING
        )

    @pytest.mark.parametrize("current", [OrderStatus.COMPLETED, OrderStatus.CANCELLED])
    @pytest.mark.parametrize("target", ALL)
    def test_terminal_states_are_closed(self, current, target):
        assert not OrderStateMachine.can_transition(current, target)

    def test_unknown_status_has_no_transitions(self):
        assert not OrderStateMachine.can_transition("archived", OrderStatus.PENDING)


class TestTransition:
    def test_transition_returns_previous_status(self):
        order = _order(OrderStatus.PENDING)

        previous = OrderStateMachine().transition(order, OrderStatus.COMPLETED)

        assert previous == OrderStatus.PENDING
        assert order.status == OrderStatus.COMPLETED

    def test_completed_to_pending_rejected(self):
        order = _order(OrderStatus.COMPLETED)

        with pytest.raises(InvalidOrderStatus, match="from completed to pending"):
            OrderStateMachine().transition(order, OrderStatus.PENDING)

        assert order.status == OrderStatus.COMPLETED

    @pytest.mark.parametrize("status", [OrderStatus.COMPLETED, OrderStatus.CANCELLED])
    def test_terminal_order_is_locked(self, status):
        with pytest.raises(OrderLocked):
            OrderStateMachine().ensure_mutable(_order(status))

    def test_pending_order_is_mutable(self):
        OrderStateMachine().ensure_mutable(_order(OrderStatus.PENDING))


class TestOrderIsTerminal:
    @pytest.mark.parametrize(
        "status, expected",
        [
            (OrderStatus.PENDING, False),
            (OrderStatus.COMPLETED, True),
            (OrderStatus.CANCELLED, True),
        ],
    )
    def test_is_terminal(self, status, expected):
        assert Order(status=status).is_terminal is expected
