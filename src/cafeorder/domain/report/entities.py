from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, tzinfo

from cafeorder.domain.order.entities import Order, OrderStatus

TOP_ITEMS_LIMIT = 10


@dataclass(frozen=True)
class PopularItem:
    name: str
    category: str | None
    total_quantity: int
    total_revenue: int


@dataclass(frozen=True)
class DailySalesReport:
    day: date
    total_orders: int
    total_revenue: int
    average_order_value: float
    popular_items: list[PopularItem] = field(default_factory=list)


@dataclass
class _ItemTally:
    category: str | None
    quantity: int = 0
    revenue: int = 0


def day_bounds(day: date, tz: tzinfo) -> tuple[datetime, datetime]:
    """Local-midnight window for ``day``; the end is exclusive."""
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return start, end


def build_daily_report(
    day: date,
    orders: list[Order],
    limit: int = TOP_ITEMS_LIMIT,
) -> DailySalesReport:
    counted = [order for order in orders if order.status != OrderStatus.CANCELLED]
    total_orders = len(counted)
    total_revenue = sum(order.total_amount for order in counted)
    average = total_revenue / total_orders if total_orders else 0.0

    # first appearance order is kept by the dict and sorted() is stable,
    # so equal quantities rank by which item sold first that day
    tallies: dict[str, _ItemTally] = {}
    for order in sorted(counted, key=lambda candidate: (candidate.created_at, candidate.order_id)):
        for item in order.items:
            name = item.menu_name or f"menu #{item.menu_id}"
            tally = tallies.setdefault(name, _ItemTally(category=item.menu_category))
            tally.quantity += item.quantity
            tally.revenue += item.line_total

    popular = sorted(
        (
            PopularItem(
                name=name,
                category=tally.category,
                total_quantity=tally.quantity,
                total_revenue=tally.revenue,
            )
            for name, tally in tallies.items()
        ),
        key=lambda popular_item: popular_item.total_quantity,
        reverse=True,
    )

    return DailySalesReport(
        day=day,
        total_orders=total_orders,
        total_revenue=total_revenue,
        average_order_value=average,
        popular_items=popular[:limit],
    )
