from __future__ import annotations

import os
import threading
from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url

DEFAULT_POOL_SIZE = 5

_engines: dict[tuple[str, int], Engine] = {}
_engines_lock = threading.Lock()


def _database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError("DATABASE_URL is not set")
    return url


def engine_options(database_url: str, connect_timeout: int) -> dict[str, Any]:
    """Keyword arguments for ``create_engine`` by backend.

    psycopg takes ``connect_timeout`` in seconds; the sqlite driver only
    knows a lock wait ``timeout`` and manages its own pool.
    """
    if make_url(database_url).get_backend_name() == "sqlite":
        return {"connect_args": {"timeout": connect_timeout, "check_same_thread": False}}
    return {
        "pool_pre_ping": True,
        "pool_size": int(os.getenv("DB_POOL_SIZE", str(DEFAULT_POOL_SIZE))),
        "connect_args": {"connect_timeout": connect_timeout},
    }


def get_engine(timeout_seconds: float = 2.0) -> Engine:
    database_url = _database_url()
    key = (database_url, max(1, int(timeout_seconds)))
    with _engines_lock:
        engine = _engines.get(key)
        if engine is None:
            engine = create_engine(database_url, **engine_options(*key))
            _engines[key] = engine
        return engine


def dispose_engines() -> None:
    """Close every pooled connection; the next ``get_engine`` starts fresh."""
    with _engines_lock:
        engines = list(_engines.values())
        _engines.clear()
    for engine in engines:
        engine.dispose()


def ping_database(timeout_seconds: float = 1.0) -> bool:
    try:
        with get_engine(timeout_seconds).connect() as connection:
            connection.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
