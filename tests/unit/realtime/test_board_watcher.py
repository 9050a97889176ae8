from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from cafeorder.application.ports.change_feed import ChangeEvent, RowChange
from cafeorder.application.realtime.board import OrderBoard
from cafeorder.application.realtime.subscriptions import OrderSubscriptions
from cafeorder.tools.watch_orders import BoardWatcher


def _row(order_id: int, status: str) -> dict:
    return {
        "id": order_id,
        "table_id": 2,
        "status": status,
        "total_amount": 18000,
        "special_notes": None,
        "created_at": datetime(2026, 10, 19, 3, 0, tzinfo=timezone.utc).isoformat(),
        "updated_at": None,
    }


def test_watcher_follows_feed_and_logs_cues(change_feed, caplog) -> None:
    watcher = BoardWatcher(OrderBoard())
    caplog.set_level(logging.INFO, logger="cafeorder.watch")

    with OrderSubscriptions(change_feed) as subscriptions:
        subscriptions.watch_board(watcher.on_change)
        change_feed.emit(RowChange(table="orders", event=ChangeEvent.INSERT, row=_row(1, "pending")))
        change_feed.emit(RowChange(table="orders", event=ChangeEvent.UPDATE, row=_row(1, "preparing")))
        change_feed.emit(RowChange(table="orders", event=ChangeEvent.UPDATE, row=_row(1, "ready")))

    assert watcher.board.find(1).status.value == "ready"
    cues = [record.cue for record in caplog.records if record.msg == "board_changed"]
    assert cues == ["new_order", None, "order_ready"]


def test_delivered_order_drops_off_the_watched_board(change_feed) -> None:
    watcher = BoardWatcher(OrderBoard())

    with OrderSubscriptions(change_feed) as subscriptions:
        subscriptions.watch_board(watcher.on_change)
        change_feed.emit(RowChange(table="orders", event=ChangeEvent.INSERT, row=_row(4, "ready")))
        change_feed.emit(RowChange(table="orders", event=ChangeEvent.UPDATE, row=_row(4, "delivered")))

    assert watcher.board.orders == ()
