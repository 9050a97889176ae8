from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Path, status

from cafeorder.api.tracing import current_trace_context
from cafeorder.application.dto.requests import (
    AddCartItemRequest,
    CheckoutRequest,
    UpdateCartNotesRequest,
    UpdateCartQuantityRequest,
)
from cafeorder.application.dto.responses import CartResponse, CheckoutResponse
from cafeorder.application.use_cases.cart_session import CartSession
from cafeorder.application.use_cases.place_order import CheckoutCart, PlaceOrder
from cafeorder.domain.common.ids import CartSessionId, MenuItemId, TableId
from cafeorder.infrastructure.cache.cache_store import RedisCacheStore
from cafeorder.infrastructure.cache.cart_store import RedisCartRepository
from cafeorder.infrastructure.db.repositories.menu_repo import SqlAlchemyMenuRepository
from cafeorder.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository
from cafeorder.infrastructure.db.repositories.table_repo import SqlAlchemyTableRepository
from cafeorder.infrastructure.messaging.redis_publisher import RedisChangePublisher

router = APIRouter(prefix="/v1/tables/{table_id}/carts/{session_id}", tags=["customer"])

SessionId = Annotated[str, Path(min_length=1, max_length=64, pattern=r"^[A-Za-z0-9_-]+$")]


def _cart_session_use_case() -> CartSession:
    return CartSession(
        carts=RedisCartRepository(RedisCacheStore()),
        menu_repository=SqlAlchemyMenuRepository(),
        table_repository=SqlAlchemyTableRepository(),
    )


def _checkout_use_case() -> CheckoutCart:
    return CheckoutCart(
        carts=RedisCartRepository(RedisCacheStore()),
        place_order=PlaceOrder(
            menu_repository=SqlAlchemyMenuRepository(),
            table_repository=SqlAlchemyTableRepository(),
            order_repository=SqlAlchemyOrderRepository(),
            publisher=RedisChangePublisher(),
        ),
    )


@router.get("", response_model=CartResponse)
def get_cart(table_id: int, session_id: SessionId) -> CartResponse:
    return _cart_session_use_case().get(TableId(table_id), CartSessionId(session_id))


@router.post("/items", response_model=CartResponse)
def add_cart_item(
    table_id: int,
    session_id: SessionId,
    request_dto: AddCartItemRequest,
) -> CartResponse:
    return _cart_session_use_case().add_item(
        TableId(table_id),
        CartSessionId(session_id),
        request_dto,
    )


@router.patch("/items/{menu_id}/quantity", response_model=CartResponse)
def update_cart_quantity(
    table_id: int,
    session_id: SessionId,
    menu_id: int,
    request_dto: UpdateCartQuantityRequest,
) -> CartResponse:
    return _cart_session_use_case().update_quantity(
        TableId(table_id),
        CartSessionId(session_id),
        MenuItemId(menu_id),
        request_dto,
    )


@router.patch("/items/{menu_id}/notes", response_model=CartResponse)
def update_cart_notes(
    table_id: int,
    session_id: SessionId,
    menu_id: int,
    request_dto: UpdateCartNotesRequest,
) -> CartResponse:
    return _cart_session_use_case().update_notes(
        TableId(table_id),
        CartSessionId(session_id),
        MenuItemId(menu_id),
        request_dto,
    )


@router.delete("/items/{menu_id}", response_model=CartResponse)
def remove_cart_item(table_id: int, session_id: SessionId, menu_id: int) -> CartResponse:
    return _cart_session_use_case().remove_item(
        TableId(table_id),
        CartSessionId(session_id),
        MenuItemId(menu_id),
    )


@router.delete("", response_model=CartResponse)
def clear_cart(table_id: int, session_id: SessionId) -> CartResponse:
    return _cart_session_use_case().clear(TableId(table_id), CartSessionId(session_id))


@router.post("/checkout", response_model=CheckoutResponse, status_code=status.HTTP_201_CREATED)
def checkout(
    table_id: int,
    session_id: SessionId,
    request_dto: CheckoutRequest,
) -> CheckoutResponse:
    """Place the session cart as a pending order.

    Stock is pre-checked, so a sold-out item answers 409 STOCK_INSUFFICIENT
    and no order is created. Two checkouts racing for the last unit can both
    pass that check; the atomic decrement lets only one take the stock and
    the other order is still placed, with an entry in ``stockWarnings`` for
    staff to resolve.
    """
    return _checkout_use_case().execute(
        TableId(table_id),
        CartSessionId(session_id),
        request_dto.notes,
        current_trace_context(),
    )
