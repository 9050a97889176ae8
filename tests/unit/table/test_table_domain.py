from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from cafeorder.domain.common.ids import TableId
from cafeorder.domain.table.entities import Table, TableInactiveError, new_qr_token, table_url


def test_qr_token_encodes_number_and_epoch_millis() -> None:
    now = datetime(2026, 10, 19, 8, 30, tzinfo=timezone.utc)
    assert new_qr_token(7, now) == f"table_7_{int(now.timestamp() * 1000)}"


def test_qr_token_requires_positive_number() -> None:
    with pytest.raises(ValueError):
        new_qr_token(0, datetime.now(timezone.utc))


def test_table_url_joins_base_without_double_slash() -> None:
    assert table_url("https://cafe.example/", TableId(3)) == "https://cafe.example/table/3"


def test_inactive_table_fails_ensure_active() -> None:
    table = Table(table_id=TableId(1), table_number=1, qr_token="table_1_1", is_active=True)
    table.ensure_active()
    with pytest.raises(TableInactiveError):
        table.deactivate().ensure_active()
    assert table.deactivate().activate().is_active


def test_table_number_must_be_positive() -> None:
    with pytest.raises(ValueError):
        Table(table_id=TableId(1), table_number=0, qr_token="t", is_active=True)
