from __future__ import annotations

import logging
from types import TracebackType

from cafeorder.application.ports.change_feed import ChangeFeed, ChangeHandler, SubscriptionHandle
from cafeorder.domain.common.ids import OrderId

logger = logging.getLogger(__name__)

_BOARD_KEY = "board"


class OrderSubscriptions:
    """Scoped set of change-feed subscriptions.

    At most one subscription exists per order id (and one for the board);
    asking again returns the live handle. Leaving the ``with`` block
    releases every handle.
    """

    def __init__(self, feed: ChangeFeed) -> None:
        self._feed = feed
        self._handles: dict[str, SubscriptionHandle] = {}

    def __enter__(self) -> OrderSubscriptions:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def __len__(self) -> int:
        return len(self._handles)

    def _subscribe(self, key: str, on_change: ChangeHandler, row_filter: dict | None) -> SubscriptionHandle:
        handle = self._handles.get(key)
        if handle is not None:
            return handle
        handle = self._feed.subscribe("orders", on_change, row_filter=row_filter)
        self._handles[key] = handle
        return handle

    def watch_board(self, on_change: ChangeHandler) -> SubscriptionHandle:
        return self._subscribe(_BOARD_KEY, on_change, None)

    def watch_order(self, order_id: OrderId, on_change: ChangeHandler) -> SubscriptionHandle:
        return self._subscribe(f"order:{order_id}", on_change, {"id": int(order_id)})

    def release_order(self, order_id: OrderId) -> None:
        handle = self._handles.pop(f"order:{order_id}", None)
        if handle is not None:
            self._feed.unsubscribe(handle)

    def close(self) -> None:
        handles, self._handles = list(self._handles.values()), {}
        for handle in handles:
            try:
                self._feed.unsubscribe(handle)
            except Exception:
                logger.warning(
                    "subscription_release_failed",
                    extra={"subscription_id": handle.subscription_id},
                    exc_info=True,
                )
