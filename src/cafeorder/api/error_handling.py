from __future__ import annotations

import logging
from typing import Any, cast

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from cafeorder.api.middleware.request_id import get_request_id
from cafeorder.api.security import StaffUnauthorizedError
from cafeorder.application.use_cases.errors import (
    InvalidOrderTransitionError,
    MenuItemNotFoundError,
    MenuItemUnavailableError,
    OrderConflictError,
    OrderNotFoundError,
    TableNotFoundError,
)
from cafeorder.application.use_cases.menu_catalog import InvalidMenuItemError, MenuItemInUseError
from cafeorder.application.use_cases.place_order import (
    EmptyCartError,
    OrderPersistenceError,
    StockInsufficientError,
)
from cafeorder.application.use_cases.tables import TableInUseError, TableNumberTakenError

logger = logging.getLogger(__name__)


def _error_response(
    *,
    status_code: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": code,
                "message": message,
                "details": details or {},
            },
            "requestId": get_request_id(),
        },
    )


def _exception_handler(status_code: int, code: str):
    async def handler(_: Request, exc: Exception) -> JSONResponse:
        details = getattr(exc, "details", None)
        if status_code >= 500:
            logger.error("request_failed", extra={"code": code, "error": str(exc)})
        return _error_response(
            status_code=status_code,
            code=code,
            message=str(exc),
            details=details if isinstance(details, dict) else None,
        )

    return handler


async def _http_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    http_exc = cast(StarletteHTTPException, exc)
    message = str(http_exc.detail) if http_exc.detail else "request failed"
    code = "HTTP_ERROR"
    if http_exc.status_code == 404:
        code = "NOT_FOUND"
    elif http_exc.status_code == 405:
        code = "METHOD_NOT_ALLOWED"
    elif http_exc.status_code == 400:
        code = "INVALID_REQUEST"
    return _error_response(
        status_code=http_exc.status_code,
        code=code,
        message=message,
    )


async def _validation_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    validation_exc = cast(RequestValidationError, exc)
    return _error_response(
        status_code=400,
        code="INVALID_REQUEST",
        message="request validation failed",
        details={"errors": jsonable_encoder(validation_exc.errors())},
    )


ERROR_MAPPINGS: list[tuple[type[Exception], int, str]] = [
    (InvalidMenuItemError, 400, "INVALID_REQUEST"),
    (EmptyCartError, 400, "EMPTY_CART"),
    (MenuItemUnavailableError, 400, "MENU_ITEM_UNAVAILABLE"),
    (StaffUnauthorizedError, 401, "UNAUTHORIZED"),
    (TableNotFoundError, 404, "TABLE_NOT_FOUND"),
    (OrderNotFoundError, 404, "ORDER_NOT_FOUND"),
    (MenuItemNotFoundError, 404, "MENU_ITEM_NOT_FOUND"),
    (StockInsufficientError, 409, "STOCK_INSUFFICIENT"),
    (InvalidOrderTransitionError, 409, "INVALID_ORDER_TRANSITION"),
    (OrderConflictError, 409, "ORDER_CONFLICT"),
    (TableNumberTakenError, 409, "TABLE_NUMBER_TAKEN"),
    (TableInUseError, 409, "TABLE_IN_USE"),
    (MenuItemInUseError, 409, "MENU_ITEM_IN_USE"),
    (OrderPersistenceError, 500, "ORDER_PERSISTENCE_FAILED"),
]


def register_exception_handlers(app: FastAPI) -> None:
    for exc_cls, status_code, code in ERROR_MAPPINGS:
        app.add_exception_handler(exc_cls, _exception_handler(status_code, code))

    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
