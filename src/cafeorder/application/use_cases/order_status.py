from __future__ import annotations

import logging
from datetime import datetime, timezone

from cafeorder.application.dto.responses import OrderStatusChangeResponse
from cafeorder.application.mappers.order_mapper import (
    to_order_response,
    to_stock_warning_responses,
)
from cafeorder.application.metrics.order_lifecycle import record_time_to_ready, record_transition
from cafeorder.application.ports.change_feed import ChangeEvent
from cafeorder.application.ports.publisher import ChangePublisher
from cafeorder.application.ports.repositories import (
    MenuRepository,
    OrderRepository,
    OrderStatusConflictError,
)
from cafeorder.application.use_cases.context import TraceContext
from cafeorder.application.use_cases.errors import (
    InvalidOrderTransitionError,
    OrderConflictError,
    OrderNotFoundError,
)
from cafeorder.application.use_cases.notify import publish_order_change
from cafeorder.application.use_cases.stock import StockWarning, adjust_stock_with_retry
from cafeorder.domain.common.ids import OrderId
from cafeorder.domain.order.entities import Order, OrderStatus, OrderTransitionError
from cafeorder.domain.order.events import StaffCue, cue_for_status

logger = logging.getLogger(__name__)


def _load(order_repository: OrderRepository, order_id: OrderId) -> Order:
    order = order_repository.get(order_id)
    if order is None:
        raise OrderNotFoundError(f"order {order_id} not found")
    return order


def _commit_status(
    order_repository: OrderRepository,
    order: Order,
    target: OrderStatus,
) -> Order:
    try:
        order.transition_to(target)
    except OrderTransitionError as exc:
        raise InvalidOrderTransitionError(str(exc)) from exc

    try:
        persisted = order_repository.update_order_status(
            order_id=order.order_id,
            new_status=target,
            expected_status=order.status,
        )
    except OrderStatusConflictError as exc:
        raise OrderConflictError(f"order {order.order_id} changed concurrently") from exc

    record_transition(from_status=order.status, to_status=target)
    logger.info(
        "order_status_changed",
        extra={
            "order_id": order.order_id,
            "from_status": order.status.value,
            "to_status": target.value,
        },
    )
    return persisted


class CancelOrder:
    """Cancel first, then put tracked stock back.

    The status change is the durable fact. Restoring stock is a follow-up
    with bounded retries whose failures come back as warnings.
    """

    def __init__(
        self,
        order_repository: OrderRepository,
        menu_repository: MenuRepository,
        publisher: ChangePublisher,
    ) -> None:
        self._order_repository = order_repository
        self._menu_repository = menu_repository
        self._publisher = publisher

    def execute(self, order_id: OrderId, trace_ctx: TraceContext) -> OrderStatusChangeResponse:
        order = _load(self._order_repository, order_id)
        cancelled = _commit_status(self._order_repository, order, OrderStatus.CANCELLED)

        warnings: list[StockWarning] = []
        for item in self._order_repository.list_items(order_id):
            if not item.tracks_stock:
                continue
            warning = adjust_stock_with_retry(
                self._menu_repository,
                item.menu_id,
                item.quantity,
                order_id=order_id,
            )
            if warning is not None:
                warnings.append(warning)

        publish_order_change(self._publisher, ChangeEvent.UPDATE, cancelled, trace_ctx)
        return OrderStatusChangeResponse(
            order=to_order_response(cancelled),
            cue=cue_for_status(OrderStatus.CANCELLED).value,
            stockWarnings=to_stock_warning_responses(warnings),
        )


class UpdateOrderStatus:
    def __init__(
        self,
        order_repository: OrderRepository,
        publisher: ChangePublisher,
        cancel_order: CancelOrder,
    ) -> None:
        self._order_repository = order_repository
        self._publisher = publisher
        self._cancel_order = cancel_order

    def execute(
        self,
        order_id: OrderId,
        target: OrderStatus,
        trace_ctx: TraceContext,
    ) -> OrderStatusChangeResponse:
        if target == OrderStatus.CANCELLED:
            return self._cancel_order.execute(order_id, trace_ctx)

        order = _load(self._order_repository, order_id)
        persisted = _commit_status(self._order_repository, order, target)
        if target == OrderStatus.READY:
            record_time_to_ready(persisted, now=datetime.now(timezone.utc))

        publish_order_change(self._publisher, ChangeEvent.UPDATE, persisted, trace_ctx)
        cue: StaffCue = cue_for_status(target)
        return OrderStatusChangeResponse(order=to_order_response(persisted), cue=cue.value)


class AdvanceOrder:
    def __init__(self, order_repository: OrderRepository, update_status: UpdateOrderStatus) -> None:
        self._order_repository = order_repository
        self._update_status = update_status

    def execute(self, order_id: OrderId, trace_ctx: TraceContext) -> OrderStatusChangeResponse:
        order = _load(self._order_repository, order_id)
        target = order.next_status
        if target is None:
            raise InvalidOrderTransitionError(
                f"order {order_id} is {order.status.value} and has no next status"
            )
        return self._update_status.execute(order_id, target, trace_ctx)
