from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum

from cafeorder.domain.common.ids import MenuItemId, OrderId, OrderItemId, TableId
from cafeorder.domain.common.money import ensure_amount


class OrderStatus(str, Enum):
    PENDING = "pending"
    PREPARING = "preparing"
    READY = "ready"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PREPARING, OrderStatus.CANCELLED}),
    OrderStatus.PREPARING: frozenset({OrderStatus.READY, OrderStatus.CANCELLED}),
    OrderStatus.READY: frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

_NEXT_STATUS: dict[OrderStatus, OrderStatus] = {
    OrderStatus.PENDING: OrderStatus.PREPARING,
    OrderStatus.PREPARING: OrderStatus.READY,
    OrderStatus.READY: OrderStatus.DELIVERED,
}

_NEXT_ACTION_LABELS: dict[OrderStatus, str] = {
    OrderStatus.PENDING: "Start Preparing",
    OrderStatus.PREPARING: "Mark Ready",
    OrderStatus.READY: "Mark Delivered",
}

ACTIVE_STATUSES = frozenset({OrderStatus.PENDING, OrderStatus.PREPARING, OrderStatus.READY})


def can_transition(from_status: OrderStatus, to_status: OrderStatus) -> bool:
    return to_status in ALLOWED_TRANSITIONS[from_status]


def next_status(status: OrderStatus) -> OrderStatus | None:
    return _NEXT_STATUS.get(status)


def next_action_label(status: OrderStatus) -> str | None:
    return _NEXT_ACTION_LABELS.get(status)


def is_terminal(status: OrderStatus) -> bool:
    return not ALLOWED_TRANSITIONS[status]


@dataclass(frozen=True)
class OrderItem:
    item_id: OrderItemId | None
    order_id: OrderId
    menu_id: MenuItemId
    quantity: int
    price: int
    special_notes: str | None = None
    menu_name: str | None = None
    menu_category: str | None = None
    menu_stock_quantity: int | None = None

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValueError("quantity must be >= 1")
        ensure_amount(self.price, "price")

    @property
    def line_total(self) -> int:
        return self.price * self.quantity

    @property
    def tracks_stock(self) -> bool:
        return self.menu_stock_quantity is not None


@dataclass(frozen=True)
class Order:
    order_id: OrderId
    table_id: TableId
    status: OrderStatus
    total_amount: int
    special_notes: str | None
    created_at: datetime
    updated_at: datetime | None = None
    items: list[OrderItem] = field(default_factory=list)

    def __post_init__(self) -> None:
        ensure_amount(self.total_amount, "total_amount")
        # orders read without their items, or orphaned ones, carry no lines to check
        if self.items:
            expected_total = sum(item.line_total for item in self.items)
            if self.total_amount != expected_total:
                raise ValueError("order total must equal sum of item totals")

    @property
    def next_status(self) -> OrderStatus | None:
        return next_status(self.status)

    def transition_to(self, target: OrderStatus, now: datetime | None = None) -> Order:
        if not can_transition(self.status, target):
            raise OrderTransitionError(
                f"cannot move order {self.order_id} from status={self.status.value} "
                f"to status={target.value}"
            )
        return replace(self, status=target, updated_at=now or self.updated_at)

    def cancel(self, now: datetime | None = None) -> Order:
        return self.transition_to(OrderStatus.CANCELLED, now=now)


def order_total(lines: list[tuple[int, int]]) -> int:
    """Sum of ``price * quantity`` over ``(price, quantity)`` pairs."""
    return sum(price * quantity for price, quantity in lines)


class OrderTransitionError(Exception):
    pass
