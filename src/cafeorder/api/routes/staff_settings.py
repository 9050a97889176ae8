from __future__ import annotations

from fastapi import APIRouter, Depends

from cafeorder.api.security import require_staff
from cafeorder.application.dto.requests import CafeSettings
from cafeorder.application.use_cases.settings import CafeSettingsService
from cafeorder.infrastructure.cache.cache_store import RedisCacheStore
from cafeorder.infrastructure.cache.settings_store import RedisSettingsStore

router = APIRouter(
    prefix="/v1/admin/settings",
    tags=["staff"],
    dependencies=[Depends(require_staff)],
)


def _settings_service() -> CafeSettingsService:
    return CafeSettingsService(store=RedisSettingsStore(RedisCacheStore()))


@router.get("", response_model=CafeSettings, response_model_by_alias=True)
def get_settings() -> CafeSettings:
    return _settings_service().get()


@router.put("", response_model=CafeSettings, response_model_by_alias=True)
def save_settings(settings: CafeSettings) -> CafeSettings:
    return _settings_service().save(settings)


@router.delete("", response_model=CafeSettings, response_model_by_alias=True)
def reset_settings() -> CafeSettings:
    return _settings_service().reset()
