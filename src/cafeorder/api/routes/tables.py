from __future__ import annotations

from fastapi import APIRouter

from cafeorder.application.dto.responses import TableResponse
from cafeorder.application.use_cases.tables import ResolveTable
from cafeorder.domain.common.ids import TableId
from cafeorder.infrastructure.db.repositories.table_repo import SqlAlchemyTableRepository

router = APIRouter(tags=["customer"])


def _resolve_table_use_case() -> ResolveTable:
    return ResolveTable(repository=SqlAlchemyTableRepository())


@router.get("/v1/tables/by-qr/{qr_token}", response_model=TableResponse)
def get_table_by_qr(qr_token: str) -> TableResponse:
    return _resolve_table_use_case().by_qr_token(qr_token)


@router.get("/v1/tables/{table_id}", response_model=TableResponse)
def get_table(table_id: int) -> TableResponse:
    return _resolve_table_use_case().by_id(TableId(table_id))
