from __future__ import annotations

from datetime import timedelta

from fastapi import APIRouter, Depends, Query

from cafeorder.api.security import require_staff
from cafeorder.api.tracing import current_trace_context
from cafeorder.application.dto.responses import ReconcileResponse
from cafeorder.application.use_cases.reconcile_orphans import ReconcileOrphanOrders
from cafeorder.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository
from cafeorder.infrastructure.messaging.redis_publisher import RedisChangePublisher

router = APIRouter(
    prefix="/v1/admin/maintenance",
    tags=["staff"],
    dependencies=[Depends(require_staff)],
)


def _reconcile_use_case(grace_minutes: int) -> ReconcileOrphanOrders:
    return ReconcileOrphanOrders(
        order_repository=SqlAlchemyOrderRepository(),
        publisher=RedisChangePublisher(),
        grace=timedelta(minutes=grace_minutes),
    )


@router.post("/reconcile-orphans", response_model=ReconcileResponse)
def reconcile_orphans(
    grace_minutes: int = Query(default=5, alias="graceMinutes", ge=1, le=1440),
) -> ReconcileResponse:
    return _reconcile_use_case(grace_minutes).execute(current_trace_context())
