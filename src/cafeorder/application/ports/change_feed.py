from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Protocol


class ChangeEvent(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True)
class RowChange:
    table: str
    event: ChangeEvent
    row: dict[str, Any] = field(default_factory=dict)

    def matches(self, row_filter: dict[str, Any] | None) -> bool:
        if not row_filter:
            return True
        return all(self.row.get(key) == value for key, value in row_filter.items())


ChangeHandler = Callable[[RowChange], None]


@dataclass(frozen=True)
class SubscriptionHandle:
    subscription_id: str
    table: str


class ChangeFeed(Protocol):
    def subscribe(
        self,
        table: str,
        on_change: ChangeHandler,
        row_filter: dict[str, Any] | None = None,
    ) -> SubscriptionHandle: ...

    def unsubscribe(self, handle: SubscriptionHandle) -> None: ...
