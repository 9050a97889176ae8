from __future__ import annotations

from typing import Any


class TableNotFoundError(Exception):
    def __init__(self, message: str, fallback_path: str = "/") -> None:
        super().__init__(message)
        self.details: dict[str, Any] = {"fallbackPath": fallback_path}


class OrderNotFoundError(Exception):
    def __init__(self, message: str, fallback_path: str | None = None) -> None:
        super().__init__(message)
        self.details: dict[str, Any] = {"fallbackPath": fallback_path} if fallback_path else {}


class MenuItemNotFoundError(Exception):
    pass


class MenuItemUnavailableError(Exception):
    pass


class InvalidOrderTransitionError(Exception):
    pass


class OrderConflictError(Exception):
    pass
