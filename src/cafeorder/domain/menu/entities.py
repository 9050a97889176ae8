from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum

from cafeorder.domain.common.ids import MenuItemId
from cafeorder.domain.common.money import ensure_amount


class MenuCategory(str, Enum):
    COFFEE = "Coffee"
    FOOD = "Food"
    DRINK = "Drink"
    SNACK = "Snack"
    DESSERT = "Dessert"


DEFAULT_CATEGORY_IMAGES: dict[MenuCategory, str] = {
    MenuCategory.COFFEE: "/images/defaults/coffee.jpg",
    MenuCategory.FOOD: "/images/defaults/food.jpg",
    MenuCategory.DRINK: "/images/defaults/drink.jpg",
    MenuCategory.SNACK: "/images/defaults/snack.jpg",
    MenuCategory.DESSERT: "/images/defaults/dessert.jpg",
}


@dataclass(frozen=True)
class MenuItem:
    item_id: MenuItemId
    name: str
    description: str | None
    price: int
    category: MenuCategory
    is_available: bool
    stock_quantity: int | None = None
    image_url: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("name must be non-empty")
        ensure_amount(self.price, "price")
        if self.stock_quantity is not None and self.stock_quantity < 0:
            raise ValueError("stock_quantity must be >= 0")

    @property
    def tracks_stock(self) -> bool:
        return self.stock_quantity is not None

    @property
    def is_orderable(self) -> bool:
        # untracked stock never blocks ordering
        if not self.is_available:
            return False
        return self.stock_quantity is None or self.stock_quantity > 0

    @property
    def display_image_url(self) -> str:
        if self.image_url:
            return self.image_url
        return DEFAULT_CATEGORY_IMAGES[self.category]

    def with_stock(self, stock_quantity: int | None) -> MenuItem:
        return replace(self, stock_quantity=stock_quantity)
