from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from cafeorder.infrastructure.observability.logging_config import (
    ConsoleFormatter,
    JsonFormatter,
    build_formatter,
)


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "cafeorder.test", logging.WARNING, __file__, 10, "stock_adjustment_failed", None, None
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_extra_fields_are_emitted() -> None:
    payload = json.loads(JsonFormatter().format(_record(menu_id=2, delta=-1, order_id=None)))

    assert payload["message"] == "stock_adjustment_failed"
    assert payload["level"] == "WARNING"
    assert payload["logger"] == "cafeorder.test"
    assert payload["menu_id"] == 2
    assert payload["delta"] == -1
    assert "order_id" not in payload
    assert "lineno" not in payload


def test_extra_cannot_override_core_fields() -> None:
    payload = json.loads(JsonFormatter().format(_record(level="spoofed")))

    assert payload["level"] == "WARNING"


def test_console_format_is_one_readable_line() -> None:
    line = ConsoleFormatter().format(_record(menu_id=2, delta=-1))

    assert "WARNING" in line
    assert "cafeorder.test stock_adjustment_failed" in line
    assert "menu_id=2" in line
    assert "delta=-1" in line
    assert "\n" not in line


def test_build_formatter_defaults_to_json() -> None:
    assert isinstance(build_formatter("json"), JsonFormatter)
    assert isinstance(build_formatter("anything"), JsonFormatter)
    assert isinstance(build_formatter("console"), ConsoleFormatter)
