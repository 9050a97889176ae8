from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from cafeorder.application.dto.responses import ReconcileResponse
from cafeorder.application.metrics.order_lifecycle import record_orphans_cancelled
from cafeorder.application.ports.change_feed import ChangeEvent
from cafeorder.application.ports.publisher import ChangePublisher
from cafeorder.application.ports.repositories import OrderRepository, OrderStatusConflictError
from cafeorder.application.use_cases.context import TraceContext
from cafeorder.application.use_cases.notify import publish_order_change
from cafeorder.domain.order.entities import OrderStatus

logger = logging.getLogger(__name__)

DEFAULT_GRACE = timedelta(minutes=5)


class ReconcileOrphanOrders:
    """Cancel pending orders that never received any items.

    Such orders are left behind when item insertion fails after the order
    row was written. Nothing was consumed for them, so no stock moves.
    """

    def __init__(
        self,
        order_repository: OrderRepository,
        publisher: ChangePublisher,
        grace: timedelta = DEFAULT_GRACE,
    ) -> None:
        self._order_repository = order_repository
        self._publisher = publisher
        self._grace = grace

    def execute(self, trace_ctx: TraceContext, now: datetime | None = None) -> ReconcileResponse:
        current = now or datetime.now(timezone.utc)
        cancelled_ids: list[int] = []
        for orphan in self._order_repository.list_orphaned(created_before=current - self._grace):
            if orphan.status != OrderStatus.PENDING:
                continue
            try:
                cancelled = self._order_repository.update_order_status(
                    order_id=orphan.order_id,
                    new_status=OrderStatus.CANCELLED,
                    expected_status=OrderStatus.PENDING,
                )
            except OrderStatusConflictError:
                logger.info("orphan_order_skipped", extra={"order_id": orphan.order_id})
                continue
            cancelled_ids.append(int(cancelled.order_id))
            publish_order_change(self._publisher, ChangeEvent.UPDATE, cancelled, trace_ctx)

        record_orphans_cancelled(len(cancelled_ids))
        logger.info("orphan_orders_reconciled", extra={"cancelled": len(cancelled_ids)})
        return ReconcileResponse(cancelledOrderIds=cancelled_ids)
