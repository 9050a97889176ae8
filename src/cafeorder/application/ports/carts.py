from __future__ import annotations

from typing import Protocol

from cafeorder.domain.cart.entities import Cart
from cafeorder.domain.common.ids import CartSessionId, TableId


class CartRepository(Protocol):
    def load(self, table_id: TableId, session_id: CartSessionId) -> Cart: ...

    def save(self, table_id: TableId, session_id: CartSessionId, cart: Cart) -> None: ...

    def discard(self, table_id: TableId, session_id: CartSessionId) -> None: ...
