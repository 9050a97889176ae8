from __future__ import annotations

import json
from datetime import datetime
from typing import Any
from uuid import uuid4

from cafeorder.application.ports.change_feed import ChangeEvent, RowChange
from cafeorder.domain.common.ids import OrderId, TableId
from cafeorder.domain.order.entities import Order, OrderStatus


def change_channel(table: str) -> str:
    return f"changes:{table}"


def order_to_row(order: Order) -> dict[str, Any]:
    return {
        "id": int(order.order_id),
        "table_id": int(order.table_id),
        "status": order.status.value,
        "total_amount": order.total_amount,
        "special_notes": order.special_notes,
        "created_at": order.created_at.isoformat(),
        "updated_at": order.updated_at.isoformat() if order.updated_at else None,
    }


def order_from_row(row: dict[str, Any]) -> Order:
    updated_at = row.get("updated_at")
    return Order(
        order_id=OrderId(int(row["id"])),
        table_id=TableId(int(row["table_id"])),
        status=OrderStatus(row["status"]),
        total_amount=int(row["total_amount"]),
        special_notes=row.get("special_notes"),
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(updated_at) if updated_at else None,
    )


def serialize_row_change(
    *,
    table: str,
    event: ChangeEvent,
    row: dict[str, Any],
    occurred_at: datetime,
    trace_id: str | None,
    request_id: str | None,
) -> str:
    envelope = {
        "event_id": str(uuid4()),
        "event_type": f"{table}.{event.value.lower()}",
        "occurred_at": occurred_at.isoformat(),
        "request_id": request_id,
        "trace_id": trace_id,
        "table": table,
        "event": event.value,
        "row": row,
    }
    return json.dumps(envelope, separators=(",", ":"), ensure_ascii=False)


def parse_row_change(message: str | bytes) -> RowChange:
    """Inverse of :func:`serialize_row_change`; raises ``ValueError`` on junk."""
    try:
        envelope = json.loads(message)
        return RowChange(
            table=str(envelope["table"]),
            event=ChangeEvent(envelope["event"]),
            row=dict(envelope["row"]),
        )
    except (KeyError, TypeError) as exc:
        raise ValueError(f"malformed change envelope: {exc}") from exc
