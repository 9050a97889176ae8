from __future__ import annotations

from dataclasses import dataclass, replace

from cafeorder.application.mappers.event_envelope import order_from_row
from cafeorder.application.ports.change_feed import ChangeEvent, RowChange
from cafeorder.domain.order.entities import Order, OrderStatus
from cafeorder.domain.order.events import StaffCue, cue_for_pending_count

HIDDEN_ON_BOARD = frozenset({OrderStatus.DELIVERED})


@dataclass(frozen=True)
class OrderBoard:
    orders: tuple[Order, ...] = ()

    @property
    def pending_count(self) -> int:
        return sum(1 for order in self.orders if order.status == OrderStatus.PENDING)

    def find(self, order_id: int) -> Order | None:
        for order in self.orders:
            if order.order_id == order_id:
                return order
        return None


def apply_order_change(
    board: OrderBoard,
    change: RowChange,
    hidden: frozenset[OrderStatus] = HIDDEN_ON_BOARD,
) -> OrderBoard:
    """Fold one row notification into the board.

    Notifications are applied in arrival order and the latest one wins.
    Change rows carry no items, so items already on the board are kept.
    """
    if change.table != "orders":
        return board

    order_id = int(change.row["id"])
    remaining = tuple(order for order in board.orders if order.order_id != order_id)
    if change.event == ChangeEvent.DELETE:
        return OrderBoard(orders=remaining)

    incoming = order_from_row(change.row)
    if incoming.status in hidden:
        return OrderBoard(orders=remaining)

    existing = board.find(order_id)
    if existing is not None and existing.items:
        incoming = replace(incoming, items=existing.items)

    ordered = sorted(
        remaining + (incoming,),
        key=lambda order: (order.created_at, order.order_id),
        reverse=True,
    )
    return OrderBoard(orders=tuple(ordered))


def board_cue(before: OrderBoard, after: OrderBoard, change: RowChange) -> StaffCue | None:
    if change.table != "orders":
        return None
    pending_cue = cue_for_pending_count(before.pending_count, after.pending_count)
    if pending_cue is not None:
        return pending_cue
    if change.event == ChangeEvent.UPDATE and change.row.get("status") == OrderStatus.READY.value:
        previous = before.find(int(change.row["id"]))
        if previous is None or previous.status != OrderStatus.READY:
            return StaffCue.ORDER_READY
    return None
