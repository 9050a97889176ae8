from __future__ import annotations

from cafeorder.application.dto.responses import TableQrResponse, TableResponse
from cafeorder.domain.table.entities import Table, table_url


def to_table_response(table: Table) -> TableResponse:
    return TableResponse(
        tableId=int(table.table_id),
        tableNumber=table.table_number,
        qrToken=table.qr_token,
        isActive=table.is_active,
        createdAt=table.created_at,
    )


def to_table_qr_response(table: Table, base_url: str) -> TableQrResponse:
    return TableQrResponse(
        tableId=int(table.table_id),
        tableNumber=table.table_number,
        qrToken=table.qr_token,
        url=table_url(base_url, table.table_id),
    )
