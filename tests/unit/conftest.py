from __future__ import annotations

import sys
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any
from uuid import uuid4

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from cafeorder.application.ports.change_feed import (
    ChangeHandler,
    RowChange,
    SubscriptionHandle,
)
from cafeorder.application.ports.repositories import (
    DuplicateTableNumberError,
    MenuItemReferencedError,
    MenuQuery,
    NewMenuItem,
    NewOrderItem,
    OrderQuery,
    OrderStatusConflictError,
    PersistenceError,
    StockAdjustment,
    TableQuery,
    TableReferencedError,
)
from cafeorder.domain.cart.entities import Cart
from cafeorder.domain.common.ids import MenuItemId, OrderId, OrderItemId, TableId
from cafeorder.domain.menu.entities import MenuCategory, MenuItem
from cafeorder.domain.order.entities import Order, OrderItem, OrderStatus
from cafeorder.domain.table.entities import Table

BASE_TIME = datetime(2026, 10, 19, 2, 0, tzinfo=timezone.utc)


def make_menu_item(
    item_id: int = 1,
    name: str = "Latte",
    price: int = 25000,
    category: MenuCategory = MenuCategory.COFFEE,
    is_available: bool = True,
    stock_quantity: int | None = None,
) -> MenuItem:
    return MenuItem(
        item_id=MenuItemId(item_id),
        name=name,
        description=None,
        price=price,
        category=category,
        is_available=is_available,
        stock_quantity=stock_quantity,
    )


class FakeMenuRepository:
    def __init__(self, items: list[MenuItem] | None = None) -> None:
        self.items: dict[MenuItemId, MenuItem] = {item.item_id: item for item in items or []}
        self.adjust_errors: list[Exception] = []
        self.adjust_calls: list[tuple[MenuItemId, int]] = []
        self.referenced: set[MenuItemId] = set()

    def get(self, menu_id: MenuItemId) -> MenuItem | None:
        return self.items.get(menu_id)

    def query_menus(self, query: MenuQuery) -> list[MenuItem]:
        found = list(self.items.values())
        if query.available_only:
            found = [item for item in found if item.is_available]
        if query.category is not None:
            found = [item for item in found if item.category == query.category]
        if query.menu_ids is not None:
            found = [item for item in found if item.item_id in query.menu_ids]
        return sorted(found, key=lambda item: (item.category.value, item.name, item.item_id))

    def read_stock(self, menu_id: MenuItemId) -> int | None:
        item = self.items.get(menu_id)
        return item.stock_quantity if item else None

    def adjust_stock(self, menu_id: MenuItemId, delta: int) -> StockAdjustment:
        self.adjust_calls.append((menu_id, delta))
        if self.adjust_errors:
            raise self.adjust_errors.pop(0)
        item = self.items.get(menu_id)
        if item is None:
            return StockAdjustment(success=False, error="not found")
        if item.stock_quantity is None:
            return StockAdjustment(success=False, error="stock is not tracked for this item")
        new_stock = item.stock_quantity + delta
        if new_stock < 0:
            return StockAdjustment(
                success=False,
                old_stock=item.stock_quantity,
                error="insufficient stock",
            )
        self.items[menu_id] = item.with_stock(new_stock)
        return StockAdjustment(success=True, old_stock=item.stock_quantity, new_stock=new_stock)

    def add(self, item: NewMenuItem) -> MenuItem:
        menu_id = MenuItemId(max(self.items, default=0) + 1)
        created = MenuItem(
            item_id=menu_id,
            name=item.name,
            description=item.description,
            price=item.price,
            category=item.category,
            is_available=item.is_available,
            stock_quantity=item.stock_quantity,
            image_url=item.image_url,
        )
        self.items[menu_id] = created
        return created

    def update(self, menu_id: MenuItemId, changes: dict[str, Any]) -> MenuItem | None:
        item = self.items.get(menu_id)
        if item is None:
            return None
        updated = replace(item, **changes)
        self.items[menu_id] = updated
        return updated

    def delete(self, menu_id: MenuItemId) -> bool:
        if menu_id in self.referenced:
            raise MenuItemReferencedError(f"menu item {menu_id} is referenced")
        return self.items.pop(menu_id, None) is not None


class FakeTableRepository:
    def __init__(self, tables: list[Table] | None = None) -> None:
        self.tables: dict[TableId, Table] = {table.table_id: table for table in tables or []}
        self.referenced: set[TableId] = set()

    def get(self, table_id: TableId) -> Table | None:
        return self.tables.get(table_id)

    def get_by_qr_token(self, qr_token: str) -> Table | None:
        for table in self.tables.values():
            if table.qr_token == qr_token:
                return table
        return None

    def query_tables(self, query: TableQuery) -> list[Table]:
        found = [t for t in self.tables.values() if t.is_active or not query.active_only]
        return sorted(found, key=lambda table: table.table_number)

    def add(self, table_number: int, qr_token: str) -> Table:
        if any(table.table_number == table_number for table in self.tables.values()):
            raise DuplicateTableNumberError(f"table number {table_number} already exists")
        table_id = TableId(max(self.tables, default=0) + 1)
        table = Table(table_id=table_id, table_number=table_number, qr_token=qr_token, is_active=True)
        self.tables[table_id] = table
        return table

    def set_active(self, table_id: TableId, is_active: bool) -> Table | None:
        table = self.tables.get(table_id)
        if table is None:
            return None
        updated = table.activate() if is_active else table.deactivate()
        self.tables[table_id] = updated
        return updated

    def delete(self, table_id: TableId) -> bool:
        if table_id in self.referenced:
            raise TableReferencedError(f"table {table_id} has orders")
        return self.tables.pop(table_id, None) is not None


class FakeOrderRepository:
    """Rows kept apart from items so orphans can exist, like the real tables."""

    def __init__(self, menu_repository: FakeMenuRepository) -> None:
        self._menu_repository = menu_repository
        self.rows: dict[OrderId, dict[str, Any]] = {}
        self.items: list[OrderItem] = []
        self.fail_items = False
        self.fail_create = False
        self.clock = BASE_TIME

    def _tick(self) -> datetime:
        self.clock += timedelta(seconds=1)
        return self.clock

    def create_order(
        self,
        table_id: TableId,
        total_amount: int,
        special_notes: str | None = None,
    ) -> OrderId:
        if self.fail_create:
            raise RuntimeError("database unavailable")
        order_id = OrderId(len(self.rows) + 1)
        now = self._tick()
        self.rows[order_id] = {
            "table_id": table_id,
            "status": OrderStatus.PENDING,
            "total_amount": total_amount,
            "special_notes": special_notes,
            "created_at": now,
            "updated_at": now,
        }
        return order_id

    def create_order_items(self, items: list[NewOrderItem]) -> None:
        if self.fail_items:
            raise RuntimeError("insert into order_items failed")
        for item in items:
            self.items.append(
                OrderItem(
                    item_id=OrderItemId(len(self.items) + 1),
                    order_id=item.order_id,
                    menu_id=item.menu_id,
                    quantity=item.quantity,
                    price=item.price,
                    special_notes=item.special_notes,
                )
            )

    def update_order_status(
        self,
        order_id: OrderId,
        new_status: OrderStatus,
        expected_status: OrderStatus | None = None,
    ) -> Order:
        row = self.rows.get(order_id)
        if row is None:
            raise PersistenceError(f"order {order_id} not found")
        if expected_status is not None and row["status"] != expected_status:
            raise OrderStatusConflictError(f"order {order_id} status changed concurrently")
        row["status"] = new_status
        row["updated_at"] = self._tick()
        order = self.get(order_id)
        assert order is not None
        return order

    def list_items(self, order_id: OrderId) -> list[OrderItem]:
        joined = []
        for item in self.items:
            if item.order_id != order_id:
                continue
            menu = self._menu_repository.get(item.menu_id)
            joined.append(
                replace(
                    item,
                    menu_name=menu.name if menu else None,
                    menu_category=menu.category.value if menu else None,
                    menu_stock_quantity=menu.stock_quantity if menu else None,
                )
            )
        return joined

    def _build(self, order_id: OrderId, with_items: bool) -> Order:
        row = self.rows[order_id]
        return Order(
            order_id=order_id,
            table_id=row["table_id"],
            status=row["status"],
            total_amount=row["total_amount"],
            special_notes=row["special_notes"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
            items=self.list_items(order_id) if with_items else [],
        )

    def get(self, order_id: OrderId) -> Order | None:
        if order_id not in self.rows:
            return None
        return self._build(order_id, with_items=True)

    def query_orders(self, query: OrderQuery) -> list[Order]:
        orders = [self._build(order_id, query.with_items) for order_id in self.rows]
        if query.table_id is not None:
            orders = [order for order in orders if order.table_id == query.table_id]
        if query.statuses is not None:
            orders = [order for order in orders if order.status in query.statuses]
        orders = [order for order in orders if order.status not in query.exclude_statuses]
        if query.created_from is not None:
            orders = [order for order in orders if order.created_at >= query.created_from]
        if query.created_before is not None:
            orders = [order for order in orders if order.created_at < query.created_before]
        return sorted(
            orders,
            key=lambda order: (order.created_at, order.order_id),
            reverse=query.newest_first,
        )

    def list_orphaned(self, created_before: datetime) -> list[Order]:
        with_items = {item.order_id for item in self.items}
        return [
            self._build(order_id, with_items=False)
            for order_id, row in self.rows.items()
            if row["status"] == OrderStatus.PENDING
            and row["created_at"] < created_before
            and order_id not in with_items
        ]


class FakeCartRepository:
    def __init__(self) -> None:
        self.carts: dict[tuple[TableId, str], Cart] = {}

    def load(self, table_id: TableId, session_id: str) -> Cart:
        return self.carts.get((table_id, session_id), Cart())

    def save(self, table_id: TableId, session_id: str, cart: Cart) -> None:
        self.carts[(table_id, session_id)] = cart

    def discard(self, table_id: TableId, session_id: str) -> None:
        self.carts.pop((table_id, session_id), None)


class FakeCache:
    def __init__(self) -> None:
        self.values: dict[str, str] = {}
        self.ttls: dict[str, int | None] = {}
        self.fail = False

    def get(self, key: str) -> str | None:
        if self.fail:
            raise ConnectionError("redis down")
        return self.values.get(key)

    def set(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        if self.fail:
            raise ConnectionError("redis down")
        self.values[key] = value
        self.ttls[key] = ttl_seconds

    def delete(self, key: str) -> None:
        if self.fail:
            raise ConnectionError("redis down")
        self.values.pop(key, None)


class RecordingPublisher:
    def __init__(self, fail: bool = False) -> None:
        self.messages: list[tuple[str, str]] = []
        self.fail = fail

    def publish(self, channel: str, message: str) -> None:
        if self.fail:
            raise ConnectionError("redis down")
        self.messages.append((channel, message))


class FakeChangeFeed:
    def __init__(self) -> None:
        self.active: dict[str, tuple[str, ChangeHandler, dict[str, Any] | None]] = {}
        self.subscribe_calls = 0
        self.unsubscribed: list[str] = []

    def subscribe(
        self,
        table: str,
        on_change: ChangeHandler,
        row_filter: dict[str, Any] | None = None,
    ) -> SubscriptionHandle:
        self.subscribe_calls += 1
        handle = SubscriptionHandle(subscription_id=uuid4().hex, table=table)
        self.active[handle.subscription_id] = (table, on_change, row_filter)
        return handle

    def unsubscribe(self, handle: SubscriptionHandle) -> None:
        self.unsubscribed.append(handle.subscription_id)
        self.active.pop(handle.subscription_id, None)

    def emit(self, change: RowChange) -> None:
        for table, on_change, row_filter in list(self.active.values()):
            if table == change.table and change.matches(row_filter):
                on_change(change)


@pytest.fixture
def menu_repo() -> FakeMenuRepository:
    return FakeMenuRepository(
        [
            make_menu_item(1, "Latte", 25000),
            make_menu_item(2, "Croissant", 20000, MenuCategory.SNACK, stock_quantity=5),
            make_menu_item(3, "Nasi Goreng", 35000, MenuCategory.FOOD, stock_quantity=2),
            make_menu_item(4, "Es Teh", 10000, MenuCategory.DRINK, is_available=False),
        ]
    )


@pytest.fixture
def table_repo() -> FakeTableRepository:
    return FakeTableRepository(
        [
            Table(table_id=TableId(1), table_number=1, qr_token="table_1_1000", is_active=True),
            Table(table_id=TableId(2), table_number=2, qr_token="table_2_1000", is_active=False),
        ]
    )


@pytest.fixture
def order_repo(menu_repo: FakeMenuRepository) -> FakeOrderRepository:
    return FakeOrderRepository(menu_repo)


@pytest.fixture
def carts() -> FakeCartRepository:
    return FakeCartRepository()


@pytest.fixture
def cache() -> FakeCache:
    return FakeCache()


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def change_feed() -> FakeChangeFeed:
    return FakeChangeFeed()
