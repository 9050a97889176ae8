from __future__ import annotations

from datetime import datetime, timezone

from prometheus_client import Counter, Gauge, Histogram

from cafeorder.domain.order.entities import Order, OrderStatus

ORDERS_PLACED_TOTAL = Counter(
    "cafe_orders_placed_total",
    "Total number of orders placed through checkout.",
)

ORDER_TRANSITION_TOTAL = Counter(
    "cafe_order_transition_total",
    "Total number of order lifecycle transitions.",
    ["from", "to"],
)

CHECKOUT_REJECTED_TOTAL = Counter(
    "cafe_checkout_rejected_total",
    "Total number of checkouts rejected before an order was created.",
    ["reason"],
)

STOCK_ADJUSTMENT_FAILURES_TOTAL = Counter(
    "cafe_stock_adjustment_failures_total",
    "Total number of stock adjustments that did not apply.",
    ["direction"],
)

ORPHAN_ORDERS_CANCELLED_TOTAL = Counter(
    "cafe_orphan_orders_cancelled_total",
    "Total number of item-less orders cancelled by the reconciliation sweep.",
)

ORDER_VALUE_IDR = Histogram(
    "cafe_order_value_idr",
    "Total amount of placed orders in rupiah.",
    buckets=(10_000, 25_000, 50_000, 100_000, 200_000, 500_000, 1_000_000),
)

ORDER_TIME_TO_READY_SECONDS = Histogram(
    "cafe_order_time_to_ready_seconds",
    "Time between order placement and readiness.",
)

PENDING_ORDERS = Gauge(
    "cafe_pending_orders",
    "Number of pending orders seen by the latest board query.",
)


def record_order_placed(order: Order) -> None:
    ORDERS_PLACED_TOTAL.inc()
    ORDER_VALUE_IDR.observe(order.total_amount)


def record_transition(from_status: OrderStatus, to_status: OrderStatus) -> None:
    ORDER_TRANSITION_TOTAL.labels(**{"from": from_status.value, "to": to_status.value}).inc()


def record_time_to_ready(order: Order, now: datetime | None = None) -> None:
    current = now or datetime.now(timezone.utc)
    created_at = order.created_at
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    ORDER_TIME_TO_READY_SECONDS.observe(max((current - created_at).total_seconds(), 0.0))


def record_checkout_rejected(reason: str) -> None:
    CHECKOUT_REJECTED_TOTAL.labels(reason=reason).inc()


def record_stock_adjustment_failure(delta: int) -> None:
    STOCK_ADJUSTMENT_FAILURES_TOTAL.labels(direction="restore" if delta > 0 else "consume").inc()


def record_orphans_cancelled(count: int) -> None:
    if count:
        ORPHAN_ORDERS_CANCELLED_TOTAL.inc(count)


def record_pending_orders(count: int) -> None:
    PENDING_ORDERS.set(count)
