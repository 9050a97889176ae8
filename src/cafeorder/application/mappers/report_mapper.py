from __future__ import annotations

from cafeorder.application.dto.responses import DailyReportResponse, PopularItemResponse
from cafeorder.domain.report.entities import DailySalesReport


def to_daily_report_response(report: DailySalesReport) -> DailyReportResponse:
    return DailyReportResponse(
        reportDate=report.day,
        totalOrders=report.total_orders,
        totalRevenue=report.total_revenue,
        averageOrderValue=report.average_order_value,
        popularItems=[
            PopularItemResponse(
                name=item.name,
                category=item.category,
                totalQuantity=item.total_quantity,
                totalRevenue=item.total_revenue,
            )
            for item in report.popular_items
        ],
    )
