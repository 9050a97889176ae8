from __future__ import annotations

from datetime import date, datetime, timezone, tzinfo

from cafeorder.application.dto.responses import DailyReportResponse
from cafeorder.application.mappers.report_mapper import to_daily_report_response
from cafeorder.application.ports.repositories import OrderQuery, OrderRepository
from cafeorder.domain.order.entities import OrderStatus
from cafeorder.domain.report.entities import build_daily_report, day_bounds


def report_filename(day: date) -> str:
    return f"cafe-report-{day.isoformat()}.json"


class DailyReport:
    def __init__(self, order_repository: OrderRepository, tz: tzinfo) -> None:
        self._order_repository = order_repository
        self._tz = tz

    def today(self, now: datetime | None = None) -> date:
        return (now or datetime.now(timezone.utc)).astimezone(self._tz).date()

    def execute(self, day: date | None = None) -> DailyReportResponse:
        report_day = day or self.today()
        start, end = day_bounds(report_day, self._tz)
        orders = self._order_repository.query_orders(
            OrderQuery(
                exclude_statuses=frozenset({OrderStatus.CANCELLED}),
                created_from=start,
                created_before=end,
                with_items=True,
                newest_first=False,
            )
        )
        return to_daily_report_response(build_daily_report(report_day, orders))
