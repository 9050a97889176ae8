from __future__ import annotations

import logging
from datetime import datetime, timezone

from cafeorder.application.dto.requests import CreateTableRequest
from cafeorder.application.dto.responses import TableListResponse, TableQrResponse, TableResponse
from cafeorder.application.mappers.table_mapper import to_table_qr_response, to_table_response
from cafeorder.application.ports.repositories import (
    DuplicateTableNumberError,
    TableQuery,
    TableReferencedError,
    TableRepository,
)
from cafeorder.application.use_cases.errors import TableNotFoundError
from cafeorder.domain.common.ids import TableId
from cafeorder.domain.table.entities import Table, new_qr_token

logger = logging.getLogger(__name__)


class TableInUseError(Exception):
    pass


class TableNumberTakenError(Exception):
    pass


def _require(table: Table | None, table_id: TableId) -> Table:
    if table is None:
        raise TableNotFoundError(f"table {table_id} not found")
    return table


class ResolveTable:
    """Customer entry point: a scanned QR token or a table id."""

    def __init__(self, repository: TableRepository) -> None:
        self._repository = repository

    def by_id(self, table_id: TableId) -> TableResponse:
        table = self._repository.get(table_id)
        if table is None or not table.is_active:
            raise TableNotFoundError(f"table {table_id} not found or inactive")
        return to_table_response(table)

    def by_qr_token(self, qr_token: str) -> TableResponse:
        table = self._repository.get_by_qr_token(qr_token)
        if table is None or not table.is_active:
            raise TableNotFoundError("no active table for this QR code")
        return to_table_response(table)


class ListTables:
    def __init__(self, repository: TableRepository) -> None:
        self._repository = repository

    def execute(self) -> TableListResponse:
        tables = self._repository.query_tables(TableQuery())
        return TableListResponse(tables=[to_table_response(table) for table in tables])


class CreateTable:
    def __init__(self, repository: TableRepository) -> None:
        self._repository = repository

    def execute(self, request_dto: CreateTableRequest, now: datetime | None = None) -> TableResponse:
        token = new_qr_token(request_dto.table_number, now or datetime.now(timezone.utc))
        try:
            table = self._repository.add(request_dto.table_number, token)
        except DuplicateTableNumberError as exc:
            raise TableNumberTakenError(
                f"table number {request_dto.table_number} already exists"
            ) from exc
        logger.info(
            "table_created",
            extra={"table_id": table.table_id, "table_number": table.table_number},
        )
        return to_table_response(table)


class SetTableActive:
    def __init__(self, repository: TableRepository) -> None:
        self._repository = repository

    def execute(self, table_id: TableId, is_active: bool) -> TableResponse:
        table = _require(self._repository.set_active(table_id, is_active), table_id)
        logger.info("table_active_changed", extra={"table_id": table_id, "is_active": is_active})
        return to_table_response(table)


class DeleteTable:
    def __init__(self, repository: TableRepository) -> None:
        self._repository = repository

    def execute(self, table_id: TableId) -> None:
        try:
            deleted = self._repository.delete(table_id)
        except TableReferencedError as exc:
            raise TableInUseError(
                f"table {table_id} has order history; deactivate it instead"
            ) from exc
        if not deleted:
            raise TableNotFoundError(f"table {table_id} not found")
        logger.info("table_deleted", extra={"table_id": table_id})


class GetTableQr:
    def __init__(self, repository: TableRepository, base_url: str) -> None:
        self._repository = repository
        self._base_url = base_url

    def execute(self, table_id: TableId) -> TableQrResponse:
        table = _require(self._repository.get(table_id), table_id)
        return to_table_qr_response(table, self._base_url)
