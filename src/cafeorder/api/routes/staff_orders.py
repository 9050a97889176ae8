from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from cafeorder.api.security import require_staff
from cafeorder.api.tracing import current_trace_context
from cafeorder.application.dto.requests import UpdateOrderStatusRequest
from cafeorder.application.dto.responses import OrderBoardResponse, OrderStatusChangeResponse
from cafeorder.application.use_cases.order_status import AdvanceOrder, CancelOrder, UpdateOrderStatus
from cafeorder.application.use_cases.order_views import GetOrderBoard
from cafeorder.domain.common.ids import OrderId
from cafeorder.infrastructure.db.repositories.menu_repo import SqlAlchemyMenuRepository
from cafeorder.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository
from cafeorder.infrastructure.messaging.redis_publisher import RedisChangePublisher

router = APIRouter(prefix="/v1/admin/orders", tags=["staff"], dependencies=[Depends(require_staff)])


def _order_board_use_case() -> GetOrderBoard:
    return GetOrderBoard(order_repository=SqlAlchemyOrderRepository())


def _cancel_order_use_case() -> CancelOrder:
    return CancelOrder(
        order_repository=SqlAlchemyOrderRepository(),
        menu_repository=SqlAlchemyMenuRepository(),
        publisher=RedisChangePublisher(),
    )


def _update_status_use_case() -> UpdateOrderStatus:
    return UpdateOrderStatus(
        order_repository=SqlAlchemyOrderRepository(),
        publisher=RedisChangePublisher(),
        cancel_order=_cancel_order_use_case(),
    )


def _advance_order_use_case() -> AdvanceOrder:
    return AdvanceOrder(
        order_repository=SqlAlchemyOrderRepository(),
        update_status=_update_status_use_case(),
    )


@router.get("", response_model=OrderBoardResponse)
def order_board(
    known_pending: int | None = Query(default=None, alias="knownPending", ge=0),
) -> OrderBoardResponse:
    return _order_board_use_case().execute(known_pending=known_pending)


@router.post("/{order_id}/advance", response_model=OrderStatusChangeResponse)
def advance_order(order_id: int) -> OrderStatusChangeResponse:
    return _advance_order_use_case().execute(OrderId(order_id), current_trace_context())


@router.patch("/{order_id}/status", response_model=OrderStatusChangeResponse)
def update_order_status(
    order_id: int,
    request_dto: UpdateOrderStatusRequest,
) -> OrderStatusChangeResponse:
    return _update_status_use_case().execute(
        OrderId(order_id),
        request_dto.status,
        current_trace_context(),
    )


@router.post("/{order_id}/cancel", response_model=OrderStatusChangeResponse)
def cancel_order(order_id: int) -> OrderStatusChangeResponse:
    return _cancel_order_use_case().execute(OrderId(order_id), current_trace_context())
