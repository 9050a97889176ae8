from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime

from cafeorder.domain.common.ids import TableId


@dataclass(frozen=True)
class Table:
    table_id: TableId
    table_number: int
    qr_token: str
    is_active: bool
    created_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.table_number < 1:
            raise ValueError("table_number must be >= 1")
        if not self.qr_token:
            raise ValueError("qr_token must be non-empty")

    def activate(self) -> Table:
        return replace(self, is_active=True)

    def deactivate(self) -> Table:
        return replace(self, is_active=False)

    def ensure_active(self) -> None:
        if not self.is_active:
            raise TableInactiveError(f"table {self.table_id} is not active")


def new_qr_token(table_number: int, now: datetime) -> str:
    if table_number < 1:
        raise ValueError("table_number must be >= 1")
    return f"table_{table_number}_{int(now.timestamp() * 1000)}"


def table_url(base_url: str, table_id: TableId) -> str:
    return f"{base_url.rstrip('/')}/table/{table_id}"


class TableInactiveError(Exception):
    pass
