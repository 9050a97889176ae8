from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import inspect, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.orm import Session

from cafeorder.domain.menu.entities import MenuCategory
from cafeorder.domain.table.entities import new_qr_token
from cafeorder.infrastructure.db.models.menu import MenuModel
from cafeorder.infrastructure.db.models.table import TableModel
from cafeorder.infrastructure.db.session import get_engine

SEED_TABLE_NUMBERS = range(1, 7)

SEED_MENU = [
    {
        "name": "Espresso",
        "description": "Single shot, house blend",
        "price": 18000,
        "category": MenuCategory.COFFEE,
        "stock_quantity": None,
    },
    {
        "name": "Latte",
        "description": "Espresso with steamed milk",
        "price": 25000,
        "category": MenuCategory.COFFEE,
        "stock_quantity": None,
    },
    {
        "name": "Es Kopi Susu Gula Aren",
        "description": "Iced coffee, fresh milk, palm sugar",
        "price": 22000,
        "category": MenuCategory.COFFEE,
        "stock_quantity": None,
    },
    {
        "name": "Nasi Goreng",
        "description": "Fried rice with egg and crackers",
        "price": 35000,
        "category": MenuCategory.FOOD,
        "stock_quantity": 20,
    },
    {
        "name": "Croissant",
        "description": "Butter croissant, baked this morning",
        "price": 20000,
        "category": MenuCategory.SNACK,
        "stock_quantity": 12,
    },
    {
        "name": "Es Teh Manis",
        "description": "Sweet iced tea",
        "price": 10000,
        "category": MenuCategory.DRINK,
        "stock_quantity": None,
    },
    {
        "name": "Tiramisu",
        "description": "Espresso-soaked ladyfingers",
        "price": 32000,
        "category": MenuCategory.DESSERT,
        "stock_quantity": 6,
    },
]


def main() -> None:
    engine = get_engine(timeout_seconds=2.0)
    inspector = inspect(engine)
    if not {"tables", "menus"}.issubset(set(inspector.get_table_names(schema="public"))):
        print("no schema yet")
        return

    now = datetime.now(timezone.utc)
    with Session(engine) as session:
        for table_number in SEED_TABLE_NUMBERS:
            session.execute(
                insert(TableModel)
                .values(
                    table_number=table_number,
                    qr_token=new_qr_token(table_number, now),
                    is_active=True,
                )
                .on_conflict_do_nothing(index_elements=[TableModel.table_number])
            )

        existing_names = set(session.execute(select(MenuModel.name)).scalars())
        for item in SEED_MENU:
            if item["name"] in existing_names:
                continue
            session.add(
                MenuModel(
                    name=item["name"],
                    description=item["description"],
                    price=item["price"],
                    category=item["category"].value,
                    is_available=True,
                    stock_quantity=item["stock_quantity"],
                )
            )

        session.commit()
        print("seed complete")


if __name__ == "__main__":
    main()
