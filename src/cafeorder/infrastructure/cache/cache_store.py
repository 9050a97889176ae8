from __future__ import annotations

from typing import Callable

from redis import Redis

from cafeorder.application.ports.cache import CacheStore
from cafeorder.infrastructure.cache.redis_client import get_redis_client


def decode_value(value: bytes | str | None) -> str | None:
    if value is None:
        return None
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


class RedisCacheStore(CacheStore):
    """String key/value store backing the menu cache, carts and settings."""

    def __init__(
        self,
        timeout_seconds: float = 1.0,
        client_factory: Callable[[], Redis] | None = None,
    ) -> None:
        self._client_factory = client_factory or (
            lambda: get_redis_client(timeout_seconds=timeout_seconds)
        )

    def get(self, key: str) -> str | None:
        return decode_value(self._client_factory().get(key))

    def set(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        # ex=None keeps the key until it is overwritten or deleted
        self._client_factory().set(name=key, value=value, ex=ttl_seconds)

    def delete(self, key: str) -> None:
        self._client_factory().delete(key)
