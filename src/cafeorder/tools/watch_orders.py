from __future__ import annotations

import argparse
import logging
import sys
import threading
from typing import Sequence

from cafeorder.application.ports.change_feed import RowChange
from cafeorder.application.ports.repositories import OrderQuery
from cafeorder.application.realtime.board import OrderBoard, apply_order_change, board_cue
from cafeorder.application.realtime.subscriptions import OrderSubscriptions
from cafeorder.domain.common.ids import OrderId
from cafeorder.domain.order.entities import OrderStatus
from cafeorder.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository
from cafeorder.infrastructure.messaging.change_feed import RedisChangeFeed
from cafeorder.infrastructure.observability.logging_config import configure_logging

logger = logging.getLogger("cafeorder.watch")


class BoardWatcher:
    """Keeps an order board current from change notifications and logs staff cues."""

    def __init__(self, board: OrderBoard) -> None:
        self._board = board
        self._lock = threading.Lock()

    @property
    def board(self) -> OrderBoard:
        return self._board

    def on_change(self, change: RowChange) -> None:
        with self._lock:
            before = self._board
            self._board = apply_order_change(before, change)
            cue = board_cue(before, self._board, change)
        logger.info(
            "board_changed",
            extra={
                "event": change.event.value,
                "order_id": change.row.get("id"),
                "status": change.row.get("status"),
                "pending_count": self._board.pending_count,
                "cue": cue.value if cue else None,
            },
        )


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Follow the staff order board from the terminal.")
    parser.add_argument(
        "--order",
        type=int,
        action="append",
        default=[],
        help="Also follow a single order id (repeatable).",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    configure_logging()

    orders = SqlAlchemyOrderRepository().query_orders(
        OrderQuery(exclude_statuses=frozenset({OrderStatus.DELIVERED}), with_items=True)
    )
    watcher = BoardWatcher(OrderBoard(orders=tuple(orders)))
    logger.info("board_loaded", extra={"pending_count": watcher.board.pending_count})

    feed = RedisChangeFeed()
    stop = threading.Event()
    try:
        with OrderSubscriptions(feed) as subscriptions:
            subscriptions.watch_board(watcher.on_change)
            for order_id in args.order:
                subscriptions.watch_order(
                    OrderId(order_id),
                    lambda change: logger.info(
                        "order_followed",
                        extra={"order_id": change.row.get("id"), "status": change.row.get("status")},
                    ),
                )
            stop.wait()
    except KeyboardInterrupt:
        pass
    finally:
        feed.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
