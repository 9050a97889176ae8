from __future__ import annotations

from cafeorder.application.dto.responses import CartItemResponse, CartResponse
from cafeorder.domain.cart.entities import Cart
from cafeorder.domain.common.ids import CartSessionId, TableId


def to_cart_response(table_id: TableId, session_id: CartSessionId, cart: Cart) -> CartResponse:
    return CartResponse(
        tableId=int(table_id),
        sessionId=str(session_id),
        items=[
            CartItemResponse(
                menuId=int(item.menu_id),
                name=item.menu_item.name,
                price=item.menu_item.price,
                quantity=item.quantity,
                lineTotal=item.line_total,
                specialNotes=item.special_notes,
            )
            for item in cart.items
        ],
        itemCount=sum(item.quantity for item in cart.items),
        total=cart.total,
    )
