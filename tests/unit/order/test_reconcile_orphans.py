from __future__ import annotations

import json
import sys
from datetime import timedelta
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from cafeorder.application.ports.repositories import NewOrderItem
from cafeorder.application.use_cases.context import TraceContext
from cafeorder.application.use_cases.reconcile_orphans import ReconcileOrphanOrders
from cafeorder.domain.common.ids import MenuItemId, TableId
from cafeorder.domain.order.entities import OrderStatus

TRACE = TraceContext(trace_id=None, request_id="sweep")


def test_only_old_pending_orders_without_items_are_cancelled(order_repo, publisher) -> None:
    orphan = order_repo.create_order(TableId(1), 25000)
    complete = order_repo.create_order(TableId(1), 25000)
    order_repo.create_order_items(
        [NewOrderItem(order_id=complete, menu_id=MenuItemId(1), quantity=1, price=25000)]
    )
    now = order_repo.clock + timedelta(minutes=10)
    fresh_orphan = order_repo.create_order(TableId(1), 25000)
    order_repo.rows[fresh_orphan]["created_at"] = now - timedelta(minutes=1)

    response = ReconcileOrphanOrders(order_repo, publisher).execute(TRACE, now=now)

    assert response.cancelledOrderIds == [orphan]
    assert order_repo.get(orphan).status == OrderStatus.CANCELLED
    assert order_repo.get(complete).status == OrderStatus.PENDING
    assert order_repo.get(fresh_orphan).status == OrderStatus.PENDING
    assert len(publisher.messages) == 1


def test_grace_period_is_configurable(order_repo, publisher) -> None:
    orphan = order_repo.create_order(TableId(1), 10000)
    now = order_repo.clock + timedelta(seconds=90)

    default = ReconcileOrphanOrders(order_repo, publisher).execute(TRACE, now=now)
    short = ReconcileOrphanOrders(order_repo, publisher, grace=timedelta(minutes=1)).execute(
        TRACE, now=now
    )

    assert default.cancelledOrderIds == []
    assert short.cancelledOrderIds == [orphan]


def test_nothing_to_do_is_an_empty_result(order_repo, publisher) -> None:
    response = ReconcileOrphanOrders(order_repo, publisher).execute(TRACE)

    assert response.cancelledOrderIds == []
    assert publisher.messages == []


def test_job_context_tags_published_changes(order_repo, publisher) -> None:
    order_repo.create_order(TableId(1), 10000)
    context = TraceContext.for_job("reconcile-orphans")

    ReconcileOrphanOrders(order_repo, publisher).execute(
        context, now=order_repo.clock + timedelta(hours=1)
    )

    envelope = json.loads(publisher.messages[0][1])
    assert context.request_id.startswith("reconcile-orphans-")
    assert envelope["request_id"] == context.request_id
    assert envelope["trace_id"] is None
