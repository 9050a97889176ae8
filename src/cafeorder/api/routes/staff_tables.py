from __future__ import annotations

import os

from fastapi import APIRouter, Depends, Response, status

from cafeorder.api.security import require_staff
from cafeorder.application.dto.requests import CreateTableRequest, SetTableActiveRequest
from cafeorder.application.dto.responses import TableListResponse, TableQrResponse, TableResponse
from cafeorder.application.use_cases.tables import (
    CreateTable,
    DeleteTable,
    GetTableQr,
    ListTables,
    SetTableActive,
)
from cafeorder.domain.common.ids import TableId
from cafeorder.infrastructure.db.repositories.table_repo import SqlAlchemyTableRepository

router = APIRouter(prefix="/v1/admin/tables", tags=["staff"], dependencies=[Depends(require_staff)])


def _list_tables_use_case() -> ListTables:
    return ListTables(repository=SqlAlchemyTableRepository())


def _create_table_use_case() -> CreateTable:
    return CreateTable(repository=SqlAlchemyTableRepository())


def _set_table_active_use_case() -> SetTableActive:
    return SetTableActive(repository=SqlAlchemyTableRepository())


def _delete_table_use_case() -> DeleteTable:
    return DeleteTable(repository=SqlAlchemyTableRepository())


def _table_qr_use_case() -> GetTableQr:
    return GetTableQr(
        repository=SqlAlchemyTableRepository(),
        base_url=os.getenv("APP_BASE_URL", "http://localhost:3000"),
    )


@router.get("", response_model=TableListResponse)
def list_tables() -> TableListResponse:
    return _list_tables_use_case().execute()


@router.post("", response_model=TableResponse, status_code=status.HTTP_201_CREATED)
def create_table(request_dto: CreateTableRequest) -> TableResponse:
    return _create_table_use_case().execute(request_dto)


@router.patch("/{table_id}", response_model=TableResponse)
def set_table_active(table_id: int, request_dto: SetTableActiveRequest) -> TableResponse:
    return _set_table_active_use_case().execute(TableId(table_id), request_dto.is_active)


@router.delete("/{table_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_table(table_id: int) -> Response:
    _delete_table_use_case().execute(TableId(table_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{table_id}/qr", response_model=TableQrResponse)
def table_qr(table_id: int) -> TableQrResponse:
    return _table_qr_use_case().execute(TableId(table_id))
