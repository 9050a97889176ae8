from __future__ import annotations

import argparse
import sys
from datetime import timedelta
from typing import Sequence

from cafeorder.application.use_cases.context import TraceContext
from cafeorder.application.use_cases.reconcile_orphans import ReconcileOrphanOrders
from cafeorder.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository
from cafeorder.infrastructure.messaging.redis_publisher import RedisChangePublisher
from cafeorder.infrastructure.observability.logging_config import configure_logging


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Cancel pending orders that were left without any items."
    )
    parser.add_argument(
        "--grace-minutes",
        type=int,
        default=5,
        help="Only orders older than this are considered (default: 5).",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    configure_logging()
    use_case = ReconcileOrphanOrders(
        order_repository=SqlAlchemyOrderRepository(),
        publisher=RedisChangePublisher(),
        grace=timedelta(minutes=max(args.grace_minutes, 1)),
    )
    result = use_case.execute(TraceContext.for_job("reconcile-orphans"))
    print(f"cancelled {len(result.cancelledOrderIds)} orphaned order(s)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
