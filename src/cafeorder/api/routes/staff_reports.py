from __future__ import annotations

import os
from datetime import date
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from cafeorder.api.security import require_staff
from cafeorder.application.dto.responses import DailyReportResponse
from cafeorder.application.use_cases.daily_report import DailyReport, report_filename
from cafeorder.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository

router = APIRouter(
    prefix="/v1/admin/reports",
    tags=["staff"],
    dependencies=[Depends(require_staff)],
)


def _daily_report_use_case() -> DailyReport:
    return DailyReport(
        order_repository=SqlAlchemyOrderRepository(),
        tz=ZoneInfo(os.getenv("CAFE_TIMEZONE", "Asia/Jakarta")),
    )


@router.get("/daily", response_model=DailyReportResponse)
def daily_report(day: date | None = Query(default=None)) -> DailyReportResponse:
    return _daily_report_use_case().execute(day)


@router.get("/daily/download")
def download_daily_report(day: date | None = Query(default=None)) -> JSONResponse:
    report = _daily_report_use_case().execute(day)
    return JSONResponse(
        content=report.model_dump(mode="json"),
        headers={
            "Content-Disposition": f'attachment; filename="{report_filename(report.reportDate)}"'
        },
    )
