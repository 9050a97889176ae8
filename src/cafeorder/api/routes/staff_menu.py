from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from cafeorder.api.security import require_staff
from cafeorder.application.dto.requests import CreateMenuItemRequest, UpdateMenuItemRequest
from cafeorder.application.dto.responses import MenuItemResponse, MenuResponse
from cafeorder.application.use_cases.menu_catalog import (
    CreateMenuItem,
    DeleteMenuItem,
    ListMenuItems,
    UpdateMenuItem,
)
from cafeorder.domain.common.ids import MenuItemId
from cafeorder.infrastructure.cache.cache_store import RedisCacheStore
from cafeorder.infrastructure.db.repositories.menu_repo import SqlAlchemyMenuRepository

router = APIRouter(prefix="/v1/admin/menu", tags=["staff"], dependencies=[Depends(require_staff)])


def _list_menu_use_case() -> ListMenuItems:
    return ListMenuItems(repository=SqlAlchemyMenuRepository())


def _create_menu_item_use_case() -> CreateMenuItem:
    return CreateMenuItem(repository=SqlAlchemyMenuRepository(), cache=RedisCacheStore())


def _update_menu_item_use_case() -> UpdateMenuItem:
    return UpdateMenuItem(repository=SqlAlchemyMenuRepository(), cache=RedisCacheStore())


def _delete_menu_item_use_case() -> DeleteMenuItem:
    return DeleteMenuItem(repository=SqlAlchemyMenuRepository(), cache=RedisCacheStore())


@router.get("", response_model=MenuResponse)
def list_menu_items() -> MenuResponse:
    return _list_menu_use_case().execute()


@router.post("", response_model=MenuItemResponse, status_code=status.HTTP_201_CREATED)
def create_menu_item(request_dto: CreateMenuItemRequest) -> MenuItemResponse:
    return _create_menu_item_use_case().execute(request_dto)


@router.patch("/{menu_id}", response_model=MenuItemResponse)
def update_menu_item(menu_id: int, request_dto: UpdateMenuItemRequest) -> MenuItemResponse:
    return _update_menu_item_use_case().execute(MenuItemId(menu_id), request_dto)


@router.delete("/{menu_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_menu_item(menu_id: int) -> Response:
    _delete_menu_item_use_case().execute(MenuItemId(menu_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
