from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol

from cafeorder.domain.common.ids import MenuItemId, OrderId, TableId
from cafeorder.domain.menu.entities import MenuCategory, MenuItem
from cafeorder.domain.order.entities import Order, OrderItem, OrderStatus
from cafeorder.domain.table.entities import Table


@dataclass(frozen=True)
class NewOrderItem:
    order_id: OrderId
    menu_id: MenuItemId
    quantity: int
    price: int
    special_notes: str | None = None


@dataclass(frozen=True)
class NewMenuItem:
    name: str
    description: str | None
    price: int
    category: MenuCategory
    is_available: bool = True
    stock_quantity: int | None = None
    image_url: str | None = None


@dataclass(frozen=True)
class StockAdjustment:
    success: bool
    old_stock: int | None = None
    new_stock: int | None = None
    error: str | None = None


@dataclass(frozen=True)
class OrderQuery:
    table_id: TableId | None = None
    statuses: frozenset[OrderStatus] | None = None
    exclude_statuses: frozenset[OrderStatus] = frozenset()
    created_from: datetime | None = None
    created_before: datetime | None = None
    with_items: bool = False
    newest_first: bool = True


@dataclass(frozen=True)
class MenuQuery:
    available_only: bool = False
    category: MenuCategory | None = None
    menu_ids: frozenset[MenuItemId] | None = None


@dataclass(frozen=True)
class TableQuery:
    active_only: bool = False


class OrderRepository(Protocol):
    def create_order(
        self,
        table_id: TableId,
        total_amount: int,
        special_notes: str | None = None,
    ) -> OrderId: ...

    def create_order_items(self, items: list[NewOrderItem]) -> None: ...

    def update_order_status(
        self,
        order_id: OrderId,
        new_status: OrderStatus,
        expected_status: OrderStatus | None = None,
    ) -> Order: ...

    def get(self, order_id: OrderId) -> Order | None: ...

    def list_items(self, order_id: OrderId) -> list[OrderItem]: ...

    def query_orders(self, query: OrderQuery) -> list[Order]: ...

    def list_orphaned(self, created_before: datetime) -> list[Order]: ...


class MenuRepository(Protocol):
    def get(self, menu_id: MenuItemId) -> MenuItem | None: ...

    def query_menus(self, query: MenuQuery) -> list[MenuItem]: ...

    def read_stock(self, menu_id: MenuItemId) -> int | None: ...

    def adjust_stock(self, menu_id: MenuItemId, delta: int) -> StockAdjustment: ...

    def add(self, item: NewMenuItem) -> MenuItem: ...

    def update(self, menu_id: MenuItemId, changes: dict[str, Any]) -> MenuItem | None: ...

    def delete(self, menu_id: MenuItemId) -> bool: ...


class TableRepository(Protocol):
    def get(self, table_id: TableId) -> Table | None: ...

    def get_by_qr_token(self, qr_token: str) -> Table | None: ...

    def query_tables(self, query: TableQuery) -> list[Table]: ...

    def add(self, table_number: int, qr_token: str) -> Table: ...

    def set_active(self, table_id: TableId, is_active: bool) -> Table | None: ...

    def delete(self, table_id: TableId) -> bool: ...


class PersistenceError(Exception):
    pass


class OrderStatusConflictError(Exception):
    pass


class DuplicateTableNumberError(Exception):
    pass


class MenuItemReferencedError(Exception):
    pass


class TableReferencedError(Exception):
    pass
