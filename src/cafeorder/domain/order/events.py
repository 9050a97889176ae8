from __future__ import annotations

from enum import Enum

from cafeorder.domain.order.entities import OrderStatus


class StaffCue(str, Enum):
    """Presentation signals emitted around order changes; never persisted."""

    STATUS_UPDATED = "status_updated"
    ORDER_READY = "order_ready"
    NEW_ORDER = "new_order"


def cue_for_status(new_status: OrderStatus) -> StaffCue:
    if new_status == OrderStatus.READY:
        return StaffCue.ORDER_READY
    return StaffCue.STATUS_UPDATED


def cue_for_pending_count(previous: int | None, current: int) -> StaffCue | None:
    # the first observation only establishes the baseline
    if previous is None:
        return None
    if current > previous:
        return StaffCue.NEW_ORDER
    return None
