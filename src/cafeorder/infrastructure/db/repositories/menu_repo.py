from __future__ import annotations

from typing import Any

from sqlalchemy import Engine, delete, exists, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from cafeorder.application.ports.repositories import (
    MenuItemReferencedError,
    MenuQuery,
    MenuRepository,
    NewMenuItem,
    StockAdjustment,
)
from cafeorder.domain.common.ids import MenuItemId
from cafeorder.domain.menu.entities import MenuCategory, MenuItem
from cafeorder.infrastructure.db.models.menu import MenuModel
from cafeorder.infrastructure.db.models.order import OrderItemModel
from cafeorder.infrastructure.db.session import get_engine

_UPDATABLE_COLUMNS = frozenset(
    {"name", "description", "price", "category", "is_available", "stock_quantity", "image_url"}
)


class SqlAlchemyMenuRepository(MenuRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def get(self, menu_id: MenuItemId) -> MenuItem | None:
        with Session(self._engine) as session:
            model = session.get(MenuModel, int(menu_id))
            if model is None:
                return None
            return self._to_domain(model)

    def query_menus(self, query: MenuQuery) -> list[MenuItem]:
        statement = select(MenuModel)
        if query.available_only:
            statement = statement.where(MenuModel.is_available.is_(True))
        if query.category is not None:
            statement = statement.where(MenuModel.category == query.category.value)
        if query.menu_ids is not None:
            statement = statement.where(MenuModel.id.in_([int(item) for item in query.menu_ids]))
        statement = statement.order_by(MenuModel.category, MenuModel.name, MenuModel.id)

        with Session(self._engine) as session:
            models = list(session.execute(statement).scalars().all())
            return [self._to_domain(model) for model in models]

    def read_stock(self, menu_id: MenuItemId) -> int | None:
        statement = select(MenuModel.stock_quantity).where(MenuModel.id == int(menu_id))
        with Session(self._engine) as session:
            return session.execute(statement).scalar_one_or_none()

    def adjust_stock(self, menu_id: MenuItemId, delta: int) -> StockAdjustment:
        # single conditional update: the row lock orders concurrent callers and
        # the guard makes a would-be negative result match nothing
        statement = (
            update(MenuModel)
            .where(
                MenuModel.id == int(menu_id),
                MenuModel.stock_quantity.is_not(None),
                MenuModel.stock_quantity + delta >= 0,
            )
            .values(stock_quantity=MenuModel.stock_quantity + delta)
            .returning(MenuModel.stock_quantity)
        )
        with Session(self._engine) as session:
            new_stock = session.execute(statement).scalar_one_or_none()
            if new_stock is not None:
                session.commit()
                return StockAdjustment(success=True, old_stock=new_stock - delta, new_stock=new_stock)

            session.rollback()
            current = session.execute(
                select(MenuModel.stock_quantity, MenuModel.id).where(MenuModel.id == int(menu_id))
            ).first()

        if current is None:
            return StockAdjustment(success=False, error=f"menu item {menu_id} not found")
        if current.stock_quantity is None:
            return StockAdjustment(success=False, error="stock is not tracked for this item")
        return StockAdjustment(
            success=False,
            old_stock=current.stock_quantity,
            error=(
                f"insufficient stock: available={current.stock_quantity}, "
                f"requested={-delta}"
            ),
        )

    def add(self, item: NewMenuItem) -> MenuItem:
        model = MenuModel(
            name=item.name,
            description=item.description,
            price=item.price,
            category=item.category.value,
            is_available=item.is_available,
            stock_quantity=item.stock_quantity,
            image_url=item.image_url,
        )
        with Session(self._engine) as session:
            session.add(model)
            session.commit()
            session.refresh(model)
            return self._to_domain(model)

    def update(self, menu_id: MenuItemId, changes: dict[str, Any]) -> MenuItem | None:
        values = {key: value for key, value in changes.items() if key in _UPDATABLE_COLUMNS}
        if isinstance(values.get("category"), MenuCategory):
            values["category"] = values["category"].value

        with Session(self._engine) as session:
            model = session.get(MenuModel, int(menu_id))
            if model is None:
                return None
            for key, value in values.items():
                setattr(model, key, value)
            session.commit()
            session.refresh(model)
            return self._to_domain(model)

    def delete(self, menu_id: MenuItemId) -> bool:
        referenced = select(exists().where(OrderItemModel.menu_id == int(menu_id)))
        with Session(self._engine) as session:
            if session.execute(referenced).scalar():
                raise MenuItemReferencedError(f"menu item {menu_id} is referenced by orders")
            result = session.execute(delete(MenuModel).where(MenuModel.id == int(menu_id)))
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise MenuItemReferencedError(
                    f"menu item {menu_id} is referenced by orders"
                ) from exc
        return result.rowcount == 1

    @staticmethod
    def _to_domain(model: MenuModel) -> MenuItem:
        return MenuItem(
            item_id=MenuItemId(model.id),
            name=model.name,
            description=model.description,
            price=model.price,
            category=MenuCategory(model.category),
            is_available=model.is_available,
            stock_quantity=model.stock_quantity,
            image_url=model.image_url,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
