from __future__ import annotations

import sys
from datetime import datetime, timezone
from itertools import product
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from cafeorder.domain.common.ids import MenuItemId, OrderId, OrderItemId, TableId
from cafeorder.domain.order.entities import (
    ALLOWED_TRANSITIONS,
    Order,
    OrderItem,
    OrderStatus,
    OrderTransitionError,
    can_transition,
    is_terminal,
    next_action_label,
    next_status,
    order_total,
)
from cafeorder.domain.order.events import StaffCue, cue_for_pending_count, cue_for_status

LEGAL = {
    (OrderStatus.PENDING, OrderStatus.PREPARING),
    (OrderStatus.PENDING, OrderStatus.CANCELLED),
    (OrderStatus.PREPARING, OrderStatus.READY),
    (OrderStatus.PREPARING, OrderStatus.CANCELLED),
    (OrderStatus.READY, OrderStatus.DELIVERED),
    (OrderStatus.READY, OrderStatus.CANCELLED),
}


def _order(status: OrderStatus = OrderStatus.PENDING) -> Order:
    return Order(
        order_id=OrderId(1),
        table_id=TableId(1),
        status=status,
        total_amount=50000,
        special_notes=None,
        created_at=datetime(2026, 10, 19, 8, 0, tzinfo=timezone.utc),
        items=[
            OrderItem(
                item_id=OrderItemId(1),
                order_id=OrderId(1),
                menu_id=MenuItemId(1),
                quantity=2,
                price=25000,
            )
        ],
    )


@pytest.mark.parametrize("pair", list(product(OrderStatus, OrderStatus)))
def test_transition_table_is_exhaustive(pair: tuple[OrderStatus, OrderStatus]) -> None:
    from_status, to_status = pair
    assert can_transition(from_status, to_status) is (pair in LEGAL)

    order = _order(from_status)
    if pair in LEGAL:
        assert order.transition_to(to_status).status == to_status
    else:
        with pytest.raises(OrderTransitionError):
            order.transition_to(to_status)


def test_terminal_statuses_have_no_outgoing_transitions() -> None:
    assert {status for status in OrderStatus if is_terminal(status)} == {
        OrderStatus.DELIVERED,
        OrderStatus.CANCELLED,
    }
    assert all(ALLOWED_TRANSITIONS[status] == frozenset() for status in ALLOWED_TRANSITIONS if is_terminal(status))


def test_happy_path_successors_and_labels() -> None:
    assert next_status(OrderStatus.PENDING) == OrderStatus.PREPARING
    assert next_status(OrderStatus.PREPARING) == OrderStatus.READY
    assert next_status(OrderStatus.READY) == OrderStatus.DELIVERED
    assert next_status(OrderStatus.DELIVERED) is None
    assert next_status(OrderStatus.CANCELLED) is None

    assert next_action_label(OrderStatus.PENDING) == "Start Preparing"
    assert next_action_label(OrderStatus.PREPARING) == "Mark Ready"
    assert next_action_label(OrderStatus.READY) == "Mark Delivered"
    assert next_action_label(OrderStatus.DELIVERED) is None


def test_transition_keeps_total_amount() -> None:
    order = _order()
    for target in (OrderStatus.PREPARING, OrderStatus.READY, OrderStatus.DELIVERED):
        order = order.transition_to(target)
        assert order.total_amount == 50000


def test_order_total_must_match_items() -> None:
    with pytest.raises(ValueError):
        Order(
            order_id=OrderId(1),
            table_id=TableId(1),
            status=OrderStatus.PENDING,
            total_amount=1,
            special_notes=None,
            created_at=datetime(2026, 10, 19, tzinfo=timezone.utc),
            items=_order().items,
        )


def test_order_item_quantity_floor() -> None:
    with pytest.raises(ValueError):
        OrderItem(
            item_id=None,
            order_id=OrderId(1),
            menu_id=MenuItemId(1),
            quantity=0,
            price=1000,
        )


def test_order_total_helper() -> None:
    assert order_total([(25000, 2), (20000, 1)]) == 70000


def test_cues() -> None:
    assert cue_for_status(OrderStatus.READY) == StaffCue.ORDER_READY
    assert cue_for_status(OrderStatus.PREPARING) == StaffCue.STATUS_UPDATED
    assert cue_for_status(OrderStatus.CANCELLED) == StaffCue.STATUS_UPDATED
    assert cue_for_pending_count(None, 5) is None
    assert cue_for_pending_count(2, 3) == StaffCue.NEW_ORDER
    assert cue_for_pending_count(3, 3) is None
    assert cue_for_pending_count(3, 1) is None
