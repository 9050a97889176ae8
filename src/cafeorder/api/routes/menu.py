from __future__ import annotations

import os

from fastapi import APIRouter

from cafeorder.application.dto.responses import MenuResponse
from cafeorder.application.use_cases.menu_catalog import GetMenu
from cafeorder.infrastructure.cache.cache_store import RedisCacheStore
from cafeorder.infrastructure.db.repositories.menu_repo import SqlAlchemyMenuRepository

router = APIRouter(tags=["customer"])


def _get_menu_use_case() -> GetMenu:
    return GetMenu(
        repository=SqlAlchemyMenuRepository(),
        cache=RedisCacheStore(),
        ttl_seconds=int(os.getenv("MENU_CACHE_TTL_SECONDS", "60")),
    )


@router.get("/v1/menu", response_model=MenuResponse)
def get_menu() -> MenuResponse:
    return _get_menu_use_case().execute()
