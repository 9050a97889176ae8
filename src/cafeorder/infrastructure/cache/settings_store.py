from __future__ import annotations

import json
from typing import Any

from cafeorder.application.ports.cache import CacheStore
from cafeorder.application.ports.settings import SettingsStore

SETTINGS_KEY = "cafe:settings"


class RedisSettingsStore(SettingsStore):
    def __init__(self, cache: CacheStore) -> None:
        self._cache = cache

    def load(self) -> dict[str, Any] | None:
        payload = self._cache.get(SETTINGS_KEY)
        if not payload:
            return None
        try:
            value = json.loads(payload)
        except ValueError:
            return None
        return value if isinstance(value, dict) else None

    def save(self, values: dict[str, Any]) -> None:
        self._cache.set(SETTINGS_KEY, json.dumps(values, ensure_ascii=False))

    def clear(self) -> None:
        self._cache.delete(SETTINGS_KEY)
