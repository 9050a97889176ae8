from __future__ import annotations

import asyncio
import logging
import os
from typing import Any

from redis import asyncio as redis_asyncio

from cafeorder.application.mappers.event_envelope import parse_row_change
from cafeorder.infrastructure.cache.cache_store import decode_value

logger = logging.getLogger(__name__)

CHANGE_PATTERN = "changes:*"
MAX_BACKOFF_SECONDS = 5.0


async def relay_change_message(ws_manager: Any, message: dict[str, Any]) -> bool:
    """Forward one pub/sub message to matching sockets; False when dropped."""
    channel = decode_value(message.get("channel"))
    payload = decode_value(message.get("data"))
    if not channel or not payload:
        return False

    _, _, table = channel.partition(":")
    try:
        change = parse_row_change(payload)
    except ValueError:
        logger.warning("redis_fanout_invalid_payload", extra={"channel": channel})
        return False
    if change.table != table:
        logger.warning("redis_fanout_invalid_channel", extra={"channel": channel})
        return False

    await ws_manager.broadcast(table=table, row_id=change.row.get("id"), message_json_str=payload)
    return True


async def _pump(pubsub: redis_asyncio.client.PubSub, ws_manager: Any) -> None:
    while True:
        message = await pubsub.get_message(ignore_subscribe_messages=True, timeout=1.0)
        if message is None:
            await asyncio.sleep(0.05)
            continue
        await relay_change_message(ws_manager, message)


async def start_redis_fanout(app_state: Any) -> None:
    """Relay published row changes to WebSocket subscribers until cancelled.

    Connection failures are retried with capped exponential backoff.
    """
    redis_url = os.getenv("REDIS_URL")
    if not redis_url:
        logger.warning("redis_fanout_not_started", extra={"reason": "REDIS_URL missing"})
        return

    backoff_seconds = 1.0
    while True:
        client = redis_asyncio.from_url(redis_url)
        pubsub = client.pubsub()
        try:
            await pubsub.psubscribe(CHANGE_PATTERN)
            logger.info("redis_fanout_subscribed", extra={"pattern": CHANGE_PATTERN})
            backoff_seconds = 1.0
            await _pump(pubsub, app_state.ws_manager)
        except asyncio.CancelledError:
            logger.info("redis_fanout_cancelled")
            raise
        except Exception:
            logger.exception("redis_fanout_error", extra={"backoff_seconds": backoff_seconds})
            await asyncio.sleep(backoff_seconds)
            backoff_seconds = min(backoff_seconds * 2, MAX_BACKOFF_SECONDS)
        finally:
            await pubsub.aclose()
            await client.aclose()
