from __future__ import annotations

import os
import threading

import redis

_clients: dict[tuple[str, float], redis.Redis] = {}
_clients_lock = threading.Lock()


def _redis_url() -> str:
    url = os.getenv("REDIS_URL")
    if not url:
        raise RuntimeError("REDIS_URL is not set")
    return url


def get_redis_client(timeout_seconds: float = 1.0) -> redis.Redis:
    """Shared client per (url, timeout); the pub/sub listener asks for a longer timeout."""
    key = (_redis_url(), timeout_seconds)
    with _clients_lock:
        client = _clients.get(key)
        if client is None:
            client = redis.Redis.from_url(
                key[0],
                socket_connect_timeout=timeout_seconds,
                socket_timeout=timeout_seconds,
                health_check_interval=30,
            )
            _clients[key] = client
        return client


def close_redis_clients() -> None:
    with _clients_lock:
        clients = list(_clients.values())
        _clients.clear()
    for client in clients:
        client.close()


def ping_redis(timeout_seconds: float = 1.0) -> bool:
    try:
        return bool(get_redis_client(timeout_seconds).ping())
    except Exception:
        return False
