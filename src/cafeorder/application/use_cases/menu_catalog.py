from __future__ import annotations

import logging

from pydantic import ValidationError

from cafeorder.application.dto.requests import CreateMenuItemRequest, UpdateMenuItemRequest
from cafeorder.application.dto.responses import MenuItemResponse, MenuResponse
from cafeorder.application.mappers.menu_mapper import to_menu_item_response, to_menu_response
from cafeorder.application.ports.cache import CacheStore
from cafeorder.application.ports.repositories import (
    MenuItemReferencedError,
    MenuQuery,
    MenuRepository,
    NewMenuItem,
)
from cafeorder.application.use_cases.errors import MenuItemNotFoundError
from cafeorder.domain.common.ids import MenuItemId

logger = logging.getLogger(__name__)

MENU_CACHE_KEY = "menu:available"
_NON_NULLABLE_FIELDS = ("name", "price", "category", "is_available")


class MenuItemInUseError(Exception):
    pass


class InvalidMenuItemError(Exception):
    pass


def invalidate_menu_cache(cache: CacheStore) -> None:
    try:
        cache.delete(MENU_CACHE_KEY)
    except Exception:
        logger.warning("menu_cache_invalidation_failed", exc_info=True)


class GetMenu:
    """Customer menu: available items only, cached for a short while."""

    def __init__(self, repository: MenuRepository, cache: CacheStore, ttl_seconds: int = 60) -> None:
        self._repository = repository
        self._cache = cache
        self._ttl_seconds = ttl_seconds

    def _cache_get(self) -> str | None:
        try:
            return self._cache.get(MENU_CACHE_KEY)
        except Exception:
            return None

    def _cache_set(self, value: str) -> None:
        try:
            self._cache.set(MENU_CACHE_KEY, value, ttl_seconds=self._ttl_seconds)
        except Exception:
            return

    def execute(self) -> MenuResponse:
        payload = self._cache_get()
        if payload:
            try:
                return MenuResponse.model_validate_json(payload)
            except ValidationError:
                pass

        items = self._repository.query_menus(MenuQuery(available_only=True))
        response = to_menu_response(items)
        self._cache_set(response.model_dump_json())
        return response


class ListMenuItems:
    def __init__(self, repository: MenuRepository) -> None:
        self._repository = repository

    def execute(self) -> MenuResponse:
        return to_menu_response(self._repository.query_menus(MenuQuery()))


class CreateMenuItem:
    def __init__(self, repository: MenuRepository, cache: CacheStore) -> None:
        self._repository = repository
        self._cache = cache

    def execute(self, request_dto: CreateMenuItemRequest) -> MenuItemResponse:
        name = request_dto.name.strip()
        if not name:
            raise InvalidMenuItemError("name cannot be blank")

        item = self._repository.add(
            NewMenuItem(
                name=name,
                description=request_dto.description,
                price=request_dto.price,
                category=request_dto.category,
                is_available=request_dto.is_available,
                stock_quantity=request_dto.stock_quantity,
                image_url=request_dto.image_url,
            )
        )
        invalidate_menu_cache(self._cache)
        logger.info("menu_item_created", extra={"menu_id": item.item_id})
        return to_menu_item_response(item)


class UpdateMenuItem:
    def __init__(self, repository: MenuRepository, cache: CacheStore) -> None:
        self._repository = repository
        self._cache = cache

    def execute(self, menu_id: MenuItemId, request_dto: UpdateMenuItemRequest) -> MenuItemResponse:
        # only fields the caller sent; an explicit null stock stops tracking
        changes = request_dto.model_dump(exclude_unset=True)
        for field_name in _NON_NULLABLE_FIELDS:
            if field_name in changes and changes[field_name] is None:
                raise InvalidMenuItemError(f"{field_name} cannot be null")
        if "name" in changes:
            changes["name"] = changes["name"].strip()
            if not changes["name"]:
                raise InvalidMenuItemError("name cannot be blank")

        item = self._repository.update(menu_id, changes)
        if item is None:
            raise MenuItemNotFoundError(f"menu item {menu_id} not found")
        invalidate_menu_cache(self._cache)
        logger.info("menu_item_updated", extra={"menu_id": menu_id, "fields": sorted(changes)})
        return to_menu_item_response(item)


class DeleteMenuItem:
    def __init__(self, repository: MenuRepository, cache: CacheStore) -> None:
        self._repository = repository
        self._cache = cache

    def execute(self, menu_id: MenuItemId) -> None:
        try:
            deleted = self._repository.delete(menu_id)
        except MenuItemReferencedError as exc:
            raise MenuItemInUseError(
                f"menu item {menu_id} appears in past orders; mark it unavailable instead"
            ) from exc
        if not deleted:
            raise MenuItemNotFoundError(f"menu item {menu_id} not found")
        invalidate_menu_cache(self._cache)
        logger.info("menu_item_deleted", extra={"menu_id": menu_id})
