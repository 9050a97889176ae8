from __future__ import annotations

import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from cafeorder.application.dto.requests import CafeSettings
from cafeorder.application.use_cases.settings import CafeSettingsService
from cafeorder.domain.cart.entities import Cart
from cafeorder.domain.common.ids import CartSessionId, MenuItemId, TableId
from cafeorder.infrastructure.cache.cache_store import RedisCacheStore, decode_value
from cafeorder.infrastructure.cache.cart_store import (
    CART_TTL_SECONDS,
    RedisCartRepository,
    cart_key,
)
from cafeorder.infrastructure.cache.settings_store import SETTINGS_KEY, RedisSettingsStore

TABLE = TableId(3)
SESSION = CartSessionId("abc")


def test_decode_value() -> None:
    assert decode_value(None) is None
    assert decode_value(b"kopi") == "kopi"
    assert decode_value("teh") == "teh"


class _DictRedis:
    def __init__(self) -> None:
        self.values: dict[str, bytes] = {}
        self.expiries: dict[str, int | None] = {}

    def get(self, key: str) -> bytes | None:
        return self.values.get(key)

    def set(self, name: str, value: str, ex: int | None = None) -> None:
        self.values[name] = value.encode("utf-8")
        self.expiries[name] = ex

    def delete(self, key: str) -> None:
        self.values.pop(key, None)


def test_redis_cache_store_decodes_and_expires() -> None:
    client = _DictRedis()
    store = RedisCacheStore(client_factory=lambda: client)

    store.set("menu:all", "[]", ttl_seconds=60)
    store.set("cafe:settings", "{}")

    assert store.get("menu:all") == "[]"
    assert client.expiries == {"menu:all": 60, "cafe:settings": None}

    store.delete("menu:all")
    assert store.get("menu:all") is None


def test_cart_is_stored_with_sliding_ttl(cache, menu_repo) -> None:
    carts = RedisCartRepository(cache)
    cart = Cart().add_item(menu_repo.get(MenuItemId(2)), 2, "warm")

    carts.save(TABLE, SESSION, cart)
    loaded = carts.load(TABLE, SESSION)

    assert cache.ttls[cart_key(TABLE, SESSION)] == CART_TTL_SECONDS
    assert loaded == cart
    assert loaded.items[0].menu_item.stock_quantity == 5


def test_empty_cart_save_discards_key(cache, menu_repo) -> None:
    carts = RedisCartRepository(cache)
    carts.save(TABLE, SESSION, Cart().add_item(menu_repo.get(MenuItemId(1)), 1))

    carts.save(TABLE, SESSION, Cart())

    assert cart_key(TABLE, SESSION) not in cache.values


def test_corrupt_cart_payload_loads_empty(cache) -> None:
    cache.values[cart_key(TABLE, SESSION)] = json.dumps({"items": [{"menuId": 1}]})

    assert RedisCartRepository(cache).load(TABLE, SESSION).is_empty


def test_settings_defaults_and_overrides(cache) -> None:
    service = CafeSettingsService(RedisSettingsStore(cache))

    assert service.get() == CafeSettings()

    service.save(CafeSettings(cafe_name="Kopi Senja", max_orders_per_table=4))
    stored = json.loads(cache.values[SETTINGS_KEY])

    assert stored["cafe_name"] == "Kopi Senja"
    assert service.get().max_orders_per_table == 4
    assert service.get().auto_refresh_interval == 30


def test_partial_stored_settings_merge_over_defaults(cache) -> None:
    cache.values[SETTINGS_KEY] = json.dumps({"enable_notifications": False})

    settings = CafeSettingsService(RedisSettingsStore(cache)).get()

    assert settings.enable_notifications is False
    assert settings.cafe_name == "Cafe Order"


def test_invalid_stored_settings_fall_back_to_defaults(cache) -> None:
    service = CafeSettingsService(RedisSettingsStore(cache))

    cache.values[SETTINGS_KEY] = "not json"
    assert service.get() == CafeSettings()

    cache.values[SETTINGS_KEY] = json.dumps({"auto_refresh_interval": 1})
    assert service.get() == CafeSettings()


def test_reset_clears_stored_settings(cache) -> None:
    service = CafeSettingsService(RedisSettingsStore(cache))
    service.save(CafeSettings(cafe_name="Kopi Senja"))

    assert service.reset() == CafeSettings()
    assert SETTINGS_KEY not in cache.values
