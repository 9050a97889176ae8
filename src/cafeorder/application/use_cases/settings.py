from __future__ import annotations

import logging

from pydantic import ValidationError

from cafeorder.application.dto.requests import CafeSettings
from cafeorder.application.ports.settings import SettingsStore

logger = logging.getLogger(__name__)


class CafeSettingsService:
    """Stored values layered over the defaults of :class:`CafeSettings`."""

    def __init__(self, store: SettingsStore) -> None:
        self._store = store

    def get(self) -> CafeSettings:
        stored = self._store.load() or {}
        try:
            return CafeSettings.model_validate({**CafeSettings().model_dump(), **stored})
        except ValidationError:
            logger.warning("stored_settings_invalid", extra={"keys": sorted(stored)})
            return CafeSettings()

    def save(self, settings: CafeSettings) -> CafeSettings:
        self._store.save(settings.model_dump(mode="json"))
        logger.info("settings_saved")
        return settings

    def reset(self) -> CafeSettings:
        self._store.clear()
        logger.info("settings_reset")
        return CafeSettings()
