from __future__ import annotations

from fastapi import APIRouter

from cafeorder.application.dto.responses import OrderResponse, TableOrdersResponse
from cafeorder.application.use_cases.order_views import GetTableOrder, ListActiveTableOrders
from cafeorder.domain.common.ids import OrderId, TableId
from cafeorder.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository
from cafeorder.infrastructure.db.repositories.table_repo import SqlAlchemyTableRepository

router = APIRouter(tags=["customer"])


def _active_orders_use_case() -> ListActiveTableOrders:
    return ListActiveTableOrders(
        order_repository=SqlAlchemyOrderRepository(),
        table_repository=SqlAlchemyTableRepository(),
    )


def _table_order_use_case() -> GetTableOrder:
    return GetTableOrder(order_repository=SqlAlchemyOrderRepository())


@router.get("/v1/tables/{table_id}/orders", response_model=TableOrdersResponse)
def list_active_orders(table_id: int) -> TableOrdersResponse:
    return _active_orders_use_case().execute(TableId(table_id))


@router.get("/v1/tables/{table_id}/orders/{order_id}", response_model=OrderResponse)
def get_table_order(table_id: int, order_id: int) -> OrderResponse:
    return _table_order_use_case().execute(TableId(table_id), OrderId(order_id))
