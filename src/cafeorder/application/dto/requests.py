from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from cafeorder.domain.menu.entities import MenuCategory
from cafeorder.domain.order.entities import OrderStatus


def _to_camel(value: str) -> str:
    parts = value.split("_")
    return parts[0] + "".join(part.capitalize() for part in parts[1:])


class CamelBaseModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=_to_camel,
        populate_by_name=True,
    )


class AddCartItemRequest(CamelBaseModel):
    menu_id: int
    quantity: int = Field(default=1, ge=1)
    notes: str | None = Field(default=None, max_length=1000)


class UpdateCartQuantityRequest(CamelBaseModel):
    # zero or below removes the line
    quantity: int


class UpdateCartNotesRequest(CamelBaseModel):
    notes: str | None = Field(default=None, max_length=1000)


class CheckoutRequest(CamelBaseModel):
    notes: str | None = Field(default=None, max_length=1000)


class UpdateOrderStatusRequest(CamelBaseModel):
    status: OrderStatus


class CreateMenuItemRequest(CamelBaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=1000)
    price: int = Field(gt=0)
    category: MenuCategory
    is_available: bool = True
    stock_quantity: int | None = Field(default=None, ge=0)
    image_url: str | None = Field(default=None, max_length=1000)


class UpdateMenuItemRequest(CamelBaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=1000)
    price: int | None = Field(default=None, gt=0)
    category: MenuCategory | None = None
    is_available: bool | None = None
    stock_quantity: int | None = Field(default=None, ge=0)
    image_url: str | None = Field(default=None, max_length=1000)


class CreateTableRequest(CamelBaseModel):
    table_number: int = Field(gt=0)


class SetTableActiveRequest(CamelBaseModel):
    is_active: bool


class CafeSettings(CamelBaseModel):
    cafe_name: str = Field(default="Cafe Order", min_length=1, max_length=120)
    cafe_description: str = Field(
        default="Nikmati pengalaman pemesanan digital yang mudah dan cepat",
        max_length=500,
    )
    enable_notifications: bool = True
    auto_refresh_interval: int = Field(default=30, ge=5, le=300)
    max_orders_per_table: int = Field(default=10, ge=1, le=100)
    default_category: MenuCategory = MenuCategory.COFFEE
