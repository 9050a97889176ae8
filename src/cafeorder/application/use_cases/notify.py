from __future__ import annotations

import logging
from datetime import datetime, timezone

from cafeorder.application.mappers.event_envelope import (
    change_channel,
    order_to_row,
    serialize_row_change,
)
from cafeorder.application.ports.change_feed import ChangeEvent
from cafeorder.application.ports.publisher import ChangePublisher
from cafeorder.application.use_cases.context import TraceContext
from cafeorder.domain.order.entities import Order

logger = logging.getLogger(__name__)

ORDERS_TABLE = "orders"


def publish_order_change(
    publisher: ChangePublisher,
    event: ChangeEvent,
    order: Order,
    trace_ctx: TraceContext,
) -> None:
    # the row is already committed; subscribers catch up on their next read
    message = serialize_row_change(
        table=ORDERS_TABLE,
        event=event,
        row=order_to_row(order),
        occurred_at=datetime.now(timezone.utc),
        trace_id=trace_ctx.trace_id,
        request_id=trace_ctx.request_id,
    )
    try:
        publisher.publish(channel=change_channel(ORDERS_TABLE), message=message)
    except Exception:
        logger.warning(
            "order_change_publish_failed",
            extra={"order_id": order.order_id, "event": event.value},
            exc_info=True,
        )
