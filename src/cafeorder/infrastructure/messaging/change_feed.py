from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any
from uuid import uuid4

import redis

from cafeorder.application.mappers.event_envelope import change_channel, parse_row_change
from cafeorder.application.ports.change_feed import (
    ChangeFeed,
    ChangeHandler,
    RowChange,
    SubscriptionHandle,
)
from cafeorder.infrastructure.cache.cache_store import decode_value
from cafeorder.infrastructure.cache.redis_client import get_redis_client

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Subscriber:
    table: str
    on_change: ChangeHandler
    row_filter: dict[str, Any] | None


class RedisChangeFeed(ChangeFeed):
    """Delivers published row changes to in-process handlers.

    One Redis subscription per table channel is shared by all handlers for
    that table. Handlers run on the pub/sub worker thread.
    """

    def __init__(self, client: redis.Redis | None = None, poll_seconds: float = 0.2) -> None:
        self._client = client or get_redis_client(timeout_seconds=5.0)
        self._pubsub = self._client.pubsub(ignore_subscribe_messages=True)
        self._poll_seconds = poll_seconds
        self._subscribers: dict[str, _Subscriber] = {}
        self._lock = threading.Lock()
        self._worker: Any = None

    def subscribe(
        self,
        table: str,
        on_change: ChangeHandler,
        row_filter: dict[str, Any] | None = None,
    ) -> SubscriptionHandle:
        handle = SubscriptionHandle(subscription_id=uuid4().hex, table=table)
        with self._lock:
            first_for_table = not any(sub.table == table for sub in self._subscribers.values())
            self._subscribers[handle.subscription_id] = _Subscriber(table, on_change, row_filter)
            if first_for_table:
                self._pubsub.subscribe(**{change_channel(table): self._dispatch})
            if self._worker is None:
                self._worker = self._pubsub.run_in_thread(
                    sleep_time=self._poll_seconds,
                    daemon=True,
                )
        logger.info(
            "change_feed_subscribed",
            extra={"table": table, "subscription_id": handle.subscription_id},
        )
        return handle

    def unsubscribe(self, handle: SubscriptionHandle) -> None:
        with self._lock:
            if self._subscribers.pop(handle.subscription_id, None) is None:
                return
            if not any(sub.table == handle.table for sub in self._subscribers.values()):
                self._pubsub.unsubscribe(change_channel(handle.table))
        logger.info(
            "change_feed_unsubscribed",
            extra={"table": handle.table, "subscription_id": handle.subscription_id},
        )

    def close(self) -> None:
        with self._lock:
            self._subscribers.clear()
            worker, self._worker = self._worker, None
        if worker is not None:
            worker.stop()
        self._pubsub.close()

    def _dispatch(self, message: dict[str, Any]) -> None:
        payload = decode_value(message.get("data"))
        if not payload:
            return
        try:
            change = parse_row_change(payload)
        except ValueError:
            logger.warning("change_feed_invalid_payload")
            return
        self.deliver(change)

    def deliver(self, change: RowChange) -> None:
        with self._lock:
            targets = [sub for sub in self._subscribers.values() if sub.table == change.table]
        for subscriber in targets:
            if not change.matches(subscriber.row_filter):
                continue
            try:
                subscriber.on_change(change)
            except Exception:
                logger.exception("change_handler_failed", extra={"table": change.table})
