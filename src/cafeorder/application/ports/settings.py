from __future__ import annotations

from typing import Any, Protocol


class SettingsStore(Protocol):
    def load(self) -> dict[str, Any] | None: ...

    def save(self, values: dict[str, Any]) -> None: ...

    def clear(self) -> None: ...
