from __future__ import annotations

import logging
from typing import Callable

from redis import Redis

from cafeorder.application.ports.publisher import ChangePublisher
from cafeorder.infrastructure.cache.redis_client import get_redis_client

logger = logging.getLogger(__name__)

CHANGE_CHANNEL_PREFIX = "changes:"


class RedisChangePublisher(ChangePublisher):
    """Publishes change envelopes on ``changes:<table>`` channels.

    A publish with no subscribers is not an error; the board and
    trackers pick up current state on their next fetch.
    """

    def __init__(
        self,
        timeout_seconds: float = 1.0,
        client_factory: Callable[[], Redis] | None = None,
    ) -> None:
        self._client_factory = client_factory or (
            lambda: get_redis_client(timeout_seconds=timeout_seconds)
        )

    def publish(self, channel: str, message: str) -> None:
        if not channel.startswith(CHANGE_CHANNEL_PREFIX):
            raise ValueError(f"not a change channel: {channel}")
        receivers = self._client_factory().publish(channel, message)
        if not receivers:
            logger.debug("change_unobserved", extra={"channel": channel})
            return
        logger.debug("change_published", extra={"channel": channel, "receivers": receivers})
