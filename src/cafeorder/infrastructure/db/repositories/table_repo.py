from __future__ import annotations

from sqlalchemy import Engine, delete, exists, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from cafeorder.application.ports.repositories import (
    DuplicateTableNumberError,
    TableQuery,
    TableReferencedError,
    TableRepository,
)
from cafeorder.domain.common.ids import TableId
from cafeorder.domain.table.entities import Table
from cafeorder.infrastructure.db.models.order import OrderModel
from cafeorder.infrastructure.db.models.table import TableModel
from cafeorder.infrastructure.db.session import get_engine


class SqlAlchemyTableRepository(TableRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def get(self, table_id: TableId) -> Table | None:
        with Session(self._engine) as session:
            model = session.get(TableModel, int(table_id))
            if model is None:
                return None
            return self._to_domain(model)

    def get_by_qr_token(self, qr_token: str) -> Table | None:
        statement = select(TableModel).where(TableModel.qr_token == qr_token)
        with Session(self._engine) as session:
            model = session.execute(statement).scalar_one_or_none()
            if model is None:
                return None
            return self._to_domain(model)

    def query_tables(self, query: TableQuery) -> list[Table]:
        statement = select(TableModel)
        if query.active_only:
            statement = statement.where(TableModel.is_active.is_(True))
        statement = statement.order_by(TableModel.table_number)
        with Session(self._engine) as session:
            return [self._to_domain(model) for model in session.execute(statement).scalars()]

    def add(self, table_number: int, qr_token: str) -> Table:
        taken = select(TableModel.id).where(TableModel.table_number == table_number)
        with Session(self._engine) as session:
            if session.execute(taken).first() is not None:
                raise DuplicateTableNumberError(f"table number {table_number} already exists")
            model = TableModel(table_number=table_number, qr_token=qr_token, is_active=True)
            session.add(model)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise DuplicateTableNumberError(
                    f"table number {table_number} already exists"
                ) from exc
            session.refresh(model)
            return self._to_domain(model)

    def set_active(self, table_id: TableId, is_active: bool) -> Table | None:
        with Session(self._engine) as session:
            model = session.get(TableModel, int(table_id))
            if model is None:
                return None
            model.is_active = is_active
            session.commit()
            session.refresh(model)
            return self._to_domain(model)

    def delete(self, table_id: TableId) -> bool:
        referenced = select(exists().where(OrderModel.table_id == int(table_id)))
        with Session(self._engine) as session:
            if session.execute(referenced).scalar():
                raise TableReferencedError(f"table {table_id} has orders")
            result = session.execute(delete(TableModel).where(TableModel.id == int(table_id)))
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise TableReferencedError(f"table {table_id} has orders") from exc
        return result.rowcount == 1

    @staticmethod
    def _to_domain(model: TableModel) -> Table:
        return Table(
            table_id=TableId(model.id),
            table_number=model.table_number,
            qr_token=model.qr_token,
            is_active=model.is_active,
            created_at=model.created_at,
        )
