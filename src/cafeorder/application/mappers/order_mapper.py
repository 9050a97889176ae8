from __future__ import annotations

from cafeorder.application.dto.responses import (
    OrderItemResponse,
    OrderResponse,
    StockWarningResponse,
)
from cafeorder.application.use_cases.stock import StockWarning
from cafeorder.domain.order.entities import Order, next_action_label, next_status


def to_order_response(order: Order) -> OrderResponse:
    upcoming = next_status(order.status)
    return OrderResponse(
        orderId=int(order.order_id),
        tableId=int(order.table_id),
        status=order.status.value,
        totalAmount=order.total_amount,
        specialNotes=order.special_notes,
        createdAt=order.created_at,
        updatedAt=order.updated_at,
        items=[
            OrderItemResponse(
                orderItemId=int(item.item_id) if item.item_id is not None else None,
                menuId=int(item.menu_id),
                name=item.menu_name,
                quantity=item.quantity,
                price=item.price,
                lineTotal=item.line_total,
                specialNotes=item.special_notes,
            )
            for item in order.items
        ],
        nextStatus=upcoming.value if upcoming else None,
        nextActionLabel=next_action_label(order.status),
    )


def to_stock_warning_responses(warnings: list[StockWarning]) -> list[StockWarningResponse]:
    return [
        StockWarningResponse(menuId=int(warning.menu_id), delta=warning.delta, error=warning.error)
        for warning in warnings
    ]
