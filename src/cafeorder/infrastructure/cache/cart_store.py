from __future__ import annotations

import json
import logging
from typing import Any

from cafeorder.application.ports.cache import CacheStore
from cafeorder.application.ports.carts import CartRepository
from cafeorder.domain.cart.entities import Cart, CartItem
from cafeorder.domain.common.ids import CartSessionId, MenuItemId, TableId
from cafeorder.domain.menu.entities import MenuCategory, MenuItem

logger = logging.getLogger(__name__)

CART_TTL_SECONDS = 4 * 60 * 60


def cart_key(table_id: TableId, session_id: CartSessionId) -> str:
    return f"cart:{table_id}:{session_id}"


def _item_to_dict(item: CartItem) -> dict[str, Any]:
    menu_item = item.menu_item
    return {
        "menuId": int(menu_item.item_id),
        "name": menu_item.name,
        "description": menu_item.description,
        "price": menu_item.price,
        "category": menu_item.category.value,
        "isAvailable": menu_item.is_available,
        "stockQuantity": menu_item.stock_quantity,
        "imageUrl": menu_item.image_url,
        "quantity": item.quantity,
        "specialNotes": item.special_notes,
    }


def _item_from_dict(payload: dict[str, Any]) -> CartItem:
    menu_item = MenuItem(
        item_id=MenuItemId(int(payload["menuId"])),
        name=payload["name"],
        description=payload.get("description"),
        price=int(payload["price"]),
        category=MenuCategory(payload["category"]),
        is_available=bool(payload.get("isAvailable", True)),
        stock_quantity=payload.get("stockQuantity"),
        image_url=payload.get("imageUrl"),
    )
    return CartItem(
        menu_item=menu_item,
        quantity=int(payload["quantity"]),
        special_notes=payload.get("specialNotes"),
    )


def dump_cart(cart: Cart) -> str:
    return json.dumps({"items": [_item_to_dict(item) for item in cart.items]}, ensure_ascii=False)


def load_cart(payload: str) -> Cart:
    data = json.loads(payload)
    return Cart(items=tuple(_item_from_dict(item) for item in data.get("items", [])))


class RedisCartRepository(CartRepository):
    """Carts as JSON blobs; every save pushes the expiry out again."""

    def __init__(self, cache: CacheStore, ttl_seconds: int = CART_TTL_SECONDS) -> None:
        self._cache = cache
        self._ttl_seconds = ttl_seconds

    def load(self, table_id: TableId, session_id: CartSessionId) -> Cart:
        payload = self._cache.get(cart_key(table_id, session_id))
        if not payload:
            return Cart()
        try:
            return load_cart(payload)
        except (ValueError, KeyError, TypeError):
            logger.warning(
                "cart_payload_invalid",
                extra={"table_id": table_id, "session_id": session_id},
            )
            return Cart()

    def save(self, table_id: TableId, session_id: CartSessionId, cart: Cart) -> None:
        if cart.is_empty:
            self.discard(table_id, session_id)
            return
        self._cache.set(cart_key(table_id, session_id), dump_cart(cart), ttl_seconds=self._ttl_seconds)

    def discard(self, table_id: TableId, session_id: CartSessionId) -> None:
        self._cache.delete(cart_key(table_id, session_id))
