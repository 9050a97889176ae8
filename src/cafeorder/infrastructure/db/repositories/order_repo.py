from __future__ import annotations

from datetime import datetime

from sqlalchemy import Engine, exists, select, update
from sqlalchemy.orm import Session, selectinload

from cafeorder.application.ports.repositories import (
    NewOrderItem,
    OrderQuery,
    OrderRepository,
    OrderStatusConflictError,
    PersistenceError,
)
from cafeorder.domain.common.ids import MenuItemId, OrderId, OrderItemId, TableId
from cafeorder.domain.order.entities import Order, OrderItem, OrderStatus
from cafeorder.infrastructure.db.models.order import OrderItemModel, OrderModel
from cafeorder.infrastructure.db.session import get_engine


class SqlAlchemyOrderRepository(OrderRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def create_order(
        self,
        table_id: TableId,
        total_amount: int,
        special_notes: str | None = None,
    ) -> OrderId:
        model = OrderModel(
            table_id=int(table_id),
            status=OrderStatus.PENDING.value,
            total_amount=total_amount,
            special_notes=special_notes,
        )
        with Session(self._engine) as session:
            session.add(model)
            session.commit()
            return OrderId(model.id)

    def create_order_items(self, items: list[NewOrderItem]) -> None:
        models = [
            OrderItemModel(
                order_id=int(item.order_id),
                menu_id=int(item.menu_id),
                quantity=item.quantity,
                price=item.price,
                special_notes=item.special_notes,
            )
            for item in items
        ]
        with Session(self._engine) as session:
            session.add_all(models)
            session.commit()

    def update_order_status(
        self,
        order_id: OrderId,
        new_status: OrderStatus,
        expected_status: OrderStatus | None = None,
    ) -> Order:
        statement = update(OrderModel).where(OrderModel.id == int(order_id))
        if expected_status is not None:
            statement = statement.where(OrderModel.status == expected_status.value)
        statement = statement.values(status=new_status.value)

        with Session(self._engine) as session:
            result = session.execute(statement)
            if result.rowcount != 1:
                session.rollback()
                if session.get(OrderModel, int(order_id)) is None:
                    raise PersistenceError(f"order {order_id} not found")
                raise OrderStatusConflictError(f"order {order_id} status changed concurrently")
            session.commit()

        updated = self.get(order_id)
        if updated is None:
            raise PersistenceError(f"order {order_id} not found after status update")
        return updated

    def get(self, order_id: OrderId) -> Order | None:
        statement = (
            select(OrderModel)
            .options(selectinload(OrderModel.items))
            .where(OrderModel.id == int(order_id))
        )
        with Session(self._engine) as session:
            model = session.execute(statement).scalar_one_or_none()
            if model is None:
                return None
            return self._to_domain(model, with_items=True)

    def list_items(self, order_id: OrderId) -> list[OrderItem]:
        statement = (
            select(OrderItemModel)
            .where(OrderItemModel.order_id == int(order_id))
            .order_by(OrderItemModel.id)
        )
        with Session(self._engine) as session:
            return [self._item_to_domain(model) for model in session.execute(statement).scalars()]

    def query_orders(self, query: OrderQuery) -> list[Order]:
        statement = select(OrderModel)
        if query.with_items:
            statement = statement.options(selectinload(OrderModel.items))
        if query.table_id is not None:
            statement = statement.where(OrderModel.table_id == int(query.table_id))
        if query.statuses is not None:
            statement = statement.where(
                OrderModel.status.in_([status.value for status in query.statuses])
            )
        if query.exclude_statuses:
            statement = statement.where(
                OrderModel.status.not_in([status.value for status in query.exclude_statuses])
            )
        if query.created_from is not None:
            statement = statement.where(OrderModel.created_at >= query.created_from)
        if query.created_before is not None:
            statement = statement.where(OrderModel.created_at < query.created_before)

        if query.newest_first:
            statement = statement.order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
        else:
            statement = statement.order_by(OrderModel.created_at, OrderModel.id)

        with Session(self._engine) as session:
            models = list(session.execute(statement).scalars().all())
            return [self._to_domain(model, with_items=query.with_items) for model in models]

    def list_orphaned(self, created_before: datetime) -> list[Order]:
        has_items = exists().where(OrderItemModel.order_id == OrderModel.id)
        statement = (
            select(OrderModel)
            .where(
                OrderModel.status == OrderStatus.PENDING.value,
                OrderModel.created_at < created_before,
                ~has_items,
            )
            .order_by(OrderModel.created_at, OrderModel.id)
        )
        with Session(self._engine) as session:
            return [
                self._to_domain(model, with_items=False)
                for model in session.execute(statement).scalars()
            ]

    @staticmethod
    def _item_to_domain(model: OrderItemModel) -> OrderItem:
        menu = model.menu
        return OrderItem(
            item_id=OrderItemId(model.id),
            order_id=OrderId(model.order_id),
            menu_id=MenuItemId(model.menu_id),
            quantity=model.quantity,
            price=model.price,
            special_notes=model.special_notes,
            menu_name=menu.name if menu is not None else None,
            menu_category=menu.category if menu is not None else None,
            menu_stock_quantity=menu.stock_quantity if menu is not None else None,
        )

    @classmethod
    def _to_domain(cls, model: OrderModel, with_items: bool) -> Order:
        items = [cls._item_to_domain(item) for item in model.items] if with_items else []
        return Order(
            order_id=OrderId(model.id),
            table_id=TableId(model.table_id),
            status=OrderStatus(model.status),
            total_amount=model.total_amount,
            special_notes=model.special_notes,
            created_at=model.created_at,
            updated_at=model.updated_at,
            items=items,
        )
