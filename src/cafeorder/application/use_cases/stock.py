from __future__ import annotations

import logging
from dataclasses import dataclass

from cafeorder.application.metrics.order_lifecycle import record_stock_adjustment_failure
from cafeorder.application.ports.repositories import MenuRepository, StockAdjustment
from cafeorder.domain.common.ids import MenuItemId, OrderId

logger = logging.getLogger(__name__)

DEFAULT_ATTEMPTS = 3


@dataclass(frozen=True)
class StockWarning:
    menu_id: MenuItemId
    delta: int
    error: str


def adjust_stock_with_retry(
    menu_repository: MenuRepository,
    menu_id: MenuItemId,
    delta: int,
    *,
    order_id: OrderId | None = None,
    attempts: int = DEFAULT_ATTEMPTS,
) -> StockWarning | None:
    """Apply one stock delta, retrying transport errors only.

    A rejected adjustment (untracked item, would go negative) is a business
    answer and is not retried. Returns ``None`` on success and a warning
    otherwise; nothing here raises.
    """
    last_error = "stock adjustment not attempted"
    for attempt in range(1, max(attempts, 1) + 1):
        try:
            result: StockAdjustment = menu_repository.adjust_stock(menu_id, delta)
        except Exception as exc:
            last_error = str(exc) or exc.__class__.__name__
            logger.warning(
                "stock_adjustment_retry",
                extra={
                    "menu_id": menu_id,
                    "order_id": order_id,
                    "delta": delta,
                    "attempt": attempt,
                    "error": last_error,
                },
            )
            continue

        if result.success:
            return None
        last_error = result.error or "stock adjustment rejected"
        break

    record_stock_adjustment_failure(delta)
    logger.warning(
        "stock_adjustment_failed",
        extra={"menu_id": menu_id, "order_id": order_id, "delta": delta, "error": last_error},
    )
    return StockWarning(menu_id=menu_id, delta=delta, error=last_error)
