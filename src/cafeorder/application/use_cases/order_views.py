from __future__ import annotations

from cafeorder.application.dto.responses import (
    OrderBoardResponse,
    OrderResponse,
    TableOrdersResponse,
)
from cafeorder.application.mappers.order_mapper import to_order_response
from cafeorder.application.metrics.order_lifecycle import record_pending_orders
from cafeorder.application.ports.repositories import OrderQuery, OrderRepository, TableRepository
from cafeorder.application.use_cases.errors import OrderNotFoundError, TableNotFoundError
from cafeorder.domain.common.ids import OrderId, TableId
from cafeorder.domain.order.entities import ACTIVE_STATUSES, OrderStatus
from cafeorder.domain.order.events import cue_for_pending_count


class GetTableOrder:
    def __init__(self, order_repository: OrderRepository) -> None:
        self._order_repository = order_repository

    def execute(self, table_id: TableId, order_id: OrderId) -> OrderResponse:
        order = self._order_repository.get(order_id)
        # another table's order is reported as missing, not forbidden
        if order is None or order.table_id != table_id:
            raise OrderNotFoundError(
                f"order {order_id} not found for table {table_id}",
                fallback_path=f"/table/{table_id}",
            )
        return to_order_response(order)


class ListActiveTableOrders:
    def __init__(
        self,
        order_repository: OrderRepository,
        table_repository: TableRepository,
    ) -> None:
        self._order_repository = order_repository
        self._table_repository = table_repository

    def execute(self, table_id: TableId) -> TableOrdersResponse:
        table = self._table_repository.get(table_id)
        if table is None or not table.is_active:
            raise TableNotFoundError(f"table {table_id} not found or inactive")
        orders = self._order_repository.query_orders(
            OrderQuery(table_id=table_id, statuses=ACTIVE_STATUSES, with_items=True)
        )
        return TableOrdersResponse(orders=[to_order_response(order) for order in orders])


class GetOrderBoard:
    """Staff view: everything not yet delivered, newest first."""

    def __init__(self, order_repository: OrderRepository) -> None:
        self._order_repository = order_repository

    def execute(self, known_pending: int | None = None) -> OrderBoardResponse:
        orders = self._order_repository.query_orders(
            OrderQuery(exclude_statuses=frozenset({OrderStatus.DELIVERED}), with_items=True)
        )
        pending = sum(1 for order in orders if order.status == OrderStatus.PENDING)
        record_pending_orders(pending)
        cue = cue_for_pending_count(known_pending, pending)
        return OrderBoardResponse(
            orders=[to_order_response(order) for order in orders],
            pendingCount=pending,
            cue=cue.value if cue else None,
        )
