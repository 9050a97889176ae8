from __future__ import annotations

import asyncio
import logging
import os
import time
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import Counter, Histogram
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from cafeorder.api.error_handling import register_exception_handlers
from cafeorder.api.middleware.request_id import RequestIDMiddleware
from cafeorder.api.routes.carts import router as carts_router
from cafeorder.api.routes.health import router as health_router
from cafeorder.api.routes.maintenance import router as maintenance_router
from cafeorder.api.routes.menu import router as menu_router
from cafeorder.api.routes.metrics import router as metrics_router
from cafeorder.api.routes.staff_menu import router as staff_menu_router
from cafeorder.api.routes.staff_orders import router as staff_orders_router
from cafeorder.api.routes.staff_reports import router as staff_reports_router
from cafeorder.api.routes.staff_settings import router as staff_settings_router
from cafeorder.api.routes.staff_tables import router as staff_tables_router
from cafeorder.api.routes.table_orders import router as table_orders_router
from cafeorder.api.routes.tables import router as tables_router
from cafeorder.api.ws.manager import ConnectionManager
from cafeorder.api.ws.routes import router as ws_router
from cafeorder.infrastructure.cache.redis_client import close_redis_clients
from cafeorder.infrastructure.db.session import dispose_engines
from cafeorder.infrastructure.messaging.redis_event_listener import start_redis_fanout
from cafeorder.infrastructure.observability.logging_config import configure_logging
from cafeorder.infrastructure.observability.otel import configure_otel

logger = logging.getLogger("cafeorder.api.access")

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    ["method", "route", "status_code"],
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "route"],
)


def _cors_allow_origins() -> list[str]:
    env = os.getenv("APP_ENV", "dev").lower()
    if env in {"dev", "test"}:
        return ["*"]

    raw_value = os.getenv("CORS_ALLOW_ORIGINS", os.getenv("APP_BASE_URL", ""))
    return [origin.strip() for origin in raw_value.split(",") if origin.strip()]


def _route_label(request: Request) -> str:
    # templated path keeps label cardinality bounded
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


def _observe_request(request: Request, status_code: int, started: float) -> dict[str, object]:
    elapsed = time.perf_counter() - started
    route = _route_label(request)
    REQUEST_COUNT.labels(method=request.method, route=route, status_code=str(status_code)).inc()
    REQUEST_LATENCY.labels(method=request.method, route=route).observe(elapsed)
    return {
        "method": request.method,
        "path": request.url.path,
        "route": route,
        "status_code": status_code,
        "duration_ms": round(elapsed * 1000, 2),
    }


class AccessLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception("request_error", extra=_observe_request(request, 500, started))
            raise

        fields = _observe_request(request, response.status_code, started)
        if response.status_code >= 500:
            logger.error("request_failed", extra=fields)
        else:
            logger.info("request_complete", extra=fields)
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.ws_manager = ConnectionManager()
    fanout_task = asyncio.create_task(start_redis_fanout(app.state))
    app.state.redis_fanout_task = fanout_task
    try:
        yield
    finally:
        fanout_task.cancel()
        with suppress(asyncio.CancelledError):
            await fanout_task
        close_redis_clients()
        dispose_engines()


CUSTOMER_ROUTERS = (menu_router, tables_router, carts_router, table_orders_router)
STAFF_ROUTERS = (
    staff_orders_router,
    staff_menu_router,
    staff_tables_router,
    staff_reports_router,
    staff_settings_router,
    maintenance_router,
)


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(title="Cafe Order API", version="0.1.0", lifespan=lifespan)
    register_exception_handlers(app)
    for router in (health_router, metrics_router, *CUSTOMER_ROUTERS, *STAFF_ROUTERS, ws_router):
        app.include_router(router)

    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_allow_origins(),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-Id", "Content-Disposition"],
    )

    configure_otel(app)
    return app


app = create_app()
