from __future__ import annotations

from cafeorder.application.dto.responses import MenuItemResponse, MenuResponse
from cafeorder.domain.common.money import format_price
from cafeorder.domain.menu.entities import MenuItem


def to_menu_item_response(item: MenuItem) -> MenuItemResponse:
    return MenuItemResponse(
        menuId=int(item.item_id),
        name=item.name,
        description=item.description,
        price=item.price,
        priceLabel=format_price(item.price),
        category=item.category.value,
        isAvailable=item.is_available,
        isOrderable=item.is_orderable,
        stockQuantity=item.stock_quantity,
        imageUrl=item.display_image_url,
        createdAt=item.created_at,
        updatedAt=item.updated_at,
    )


def to_menu_response(items: list[MenuItem]) -> MenuResponse:
    categories: list[str] = []
    for item in items:
        if item.category.value not in categories:
            categories.append(item.category.value)
    return MenuResponse(
        categories=categories,
        items=[to_menu_item_response(item) for item in items],
    )
