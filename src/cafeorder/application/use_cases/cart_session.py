from __future__ import annotations

from cafeorder.application.dto.requests import (
    AddCartItemRequest,
    UpdateCartNotesRequest,
    UpdateCartQuantityRequest,
)
from cafeorder.application.dto.responses import CartResponse
from cafeorder.application.mappers.cart_mapper import to_cart_response
from cafeorder.application.ports.carts import CartRepository
from cafeorder.application.ports.repositories import MenuRepository, TableRepository
from cafeorder.application.use_cases.errors import MenuItemUnavailableError, TableNotFoundError
from cafeorder.domain.cart.entities import Cart
from cafeorder.domain.common.ids import CartSessionId, MenuItemId, TableId


class CartSession:
    """Load-modify-save wrapper around the pure cart reducer."""

    def __init__(
        self,
        carts: CartRepository,
        menu_repository: MenuRepository,
        table_repository: TableRepository,
    ) -> None:
        self._carts = carts
        self._menu_repository = menu_repository
        self._table_repository = table_repository

    def _ensure_table(self, table_id: TableId) -> None:
        table = self._table_repository.get(table_id)
        if table is None or not table.is_active:
            raise TableNotFoundError(f"table {table_id} not found or inactive")

    def _store(self, table_id: TableId, session_id: CartSessionId, cart: Cart) -> CartResponse:
        self._carts.save(table_id, session_id, cart)
        return to_cart_response(table_id, session_id, cart)

    def get(self, table_id: TableId, session_id: CartSessionId) -> CartResponse:
        self._ensure_table(table_id)
        return to_cart_response(table_id, session_id, self._carts.load(table_id, session_id))

    def add_item(
        self,
        table_id: TableId,
        session_id: CartSessionId,
        request_dto: AddCartItemRequest,
    ) -> CartResponse:
        self._ensure_table(table_id)
        menu_item = self._menu_repository.get(MenuItemId(request_dto.menu_id))
        if menu_item is None or not menu_item.is_orderable:
            raise MenuItemUnavailableError(f"menu item {request_dto.menu_id} is not available")

        cart = self._carts.load(table_id, session_id)
        updated = cart.add_item(menu_item, request_dto.quantity, request_dto.notes or None)
        return self._store(table_id, session_id, updated)

    def update_quantity(
        self,
        table_id: TableId,
        session_id: CartSessionId,
        menu_id: MenuItemId,
        request_dto: UpdateCartQuantityRequest,
    ) -> CartResponse:
        cart = self._carts.load(table_id, session_id)
        return self._store(table_id, session_id, cart.update_quantity(menu_id, request_dto.quantity))

    def update_notes(
        self,
        table_id: TableId,
        session_id: CartSessionId,
        menu_id: MenuItemId,
        request_dto: UpdateCartNotesRequest,
    ) -> CartResponse:
        cart = self._carts.load(table_id, session_id)
        return self._store(table_id, session_id, cart.update_notes(menu_id, request_dto.notes))

    def remove_item(
        self,
        table_id: TableId,
        session_id: CartSessionId,
        menu_id: MenuItemId,
    ) -> CartResponse:
        cart = self._carts.load(table_id, session_id)
        return self._store(table_id, session_id, cart.remove_item(menu_id))

    def clear(self, table_id: TableId, session_id: CartSessionId) -> CartResponse:
        self._carts.discard(table_id, session_id)
        return to_cart_response(table_id, session_id, Cart())
