from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from cafeorder.application.dto.requests import (
    AddCartItemRequest,
    UpdateCartNotesRequest,
    UpdateCartQuantityRequest,
)
from cafeorder.application.use_cases.cart_session import CartSession
from cafeorder.application.use_cases.errors import MenuItemUnavailableError, TableNotFoundError
from cafeorder.domain.common.ids import CartSessionId, MenuItemId, TableId

TABLE = TableId(1)
SESSION = CartSessionId("session-1")


@pytest.fixture
def session(carts, menu_repo, table_repo) -> CartSession:
    return CartSession(carts=carts, menu_repository=menu_repo, table_repository=table_repo)


def test_new_session_starts_with_empty_cart(session) -> None:
    response = session.get(TABLE, SESSION)

    assert response.items == []
    assert response.itemCount == 0
    assert response.total == 0


def test_adding_same_item_twice_merges_lines(session) -> None:
    session.add_item(TABLE, SESSION, AddCartItemRequest(menuId=1, quantity=1))
    response = session.add_item(TABLE, SESSION, AddCartItemRequest(menuId=1, quantity=2))

    assert len(response.items) == 1
    assert response.items[0].quantity == 3
    assert response.itemCount == 3
    assert response.total == 75000


def test_cart_persists_between_calls(session, carts) -> None:
    session.add_item(TABLE, SESSION, AddCartItemRequest(menuId=2, quantity=2, notes="warm please"))

    stored = carts.load(TABLE, SESSION)
    assert stored.total == 40000
    assert stored.items[0].special_notes == "warm please"


def test_unavailable_item_cannot_be_added(session, carts) -> None:
    with pytest.raises(MenuItemUnavailableError):
        session.add_item(TABLE, SESSION, AddCartItemRequest(menuId=4))
    assert carts.load(TABLE, SESSION).is_empty


def test_sold_out_item_cannot_be_added(session, menu_repo) -> None:
    menu_repo.items[MenuItemId(3)] = menu_repo.get(MenuItemId(3)).with_stock(0)

    with pytest.raises(MenuItemUnavailableError):
        session.add_item(TABLE, SESSION, AddCartItemRequest(menuId=3))


def test_unknown_item_cannot_be_added(session) -> None:
    with pytest.raises(MenuItemUnavailableError):
        session.add_item(TABLE, SESSION, AddCartItemRequest(menuId=404))


def test_inactive_table_has_no_cart(session) -> None:
    with pytest.raises(TableNotFoundError):
        session.get(TableId(2), SESSION)
    with pytest.raises(TableNotFoundError):
        session.add_item(TableId(2), SESSION, AddCartItemRequest(menuId=1))


def test_quantity_zero_removes_line(session) -> None:
    session.add_item(TABLE, SESSION, AddCartItemRequest(menuId=1))
    session.add_item(TABLE, SESSION, AddCartItemRequest(menuId=2))

    response = session.update_quantity(
        TABLE, SESSION, MenuItemId(1), UpdateCartQuantityRequest(quantity=0)
    )

    assert [item.menuId for item in response.items] == [2]
    assert response.total == 20000


def test_notes_can_be_set_and_cleared(session) -> None:
    session.add_item(TABLE, SESSION, AddCartItemRequest(menuId=1))

    noted = session.update_notes(
        TABLE, SESSION, MenuItemId(1), UpdateCartNotesRequest(notes="less sugar")
    )
    cleared = session.update_notes(TABLE, SESSION, MenuItemId(1), UpdateCartNotesRequest(notes=""))

    assert noted.items[0].specialNotes == "less sugar"
    assert cleared.items[0].specialNotes is None


def test_remove_and_clear(session, carts) -> None:
    session.add_item(TABLE, SESSION, AddCartItemRequest(menuId=1))
    session.add_item(TABLE, SESSION, AddCartItemRequest(menuId=2))

    removed = session.remove_item(TABLE, SESSION, MenuItemId(2))
    cleared = session.clear(TABLE, SESSION)

    assert [item.menuId for item in removed.items] == [1]
    assert cleared.items == []
    assert carts.load(TABLE, SESSION).is_empty


def test_sessions_are_isolated(session) -> None:
    session.add_item(TABLE, SESSION, AddCartItemRequest(menuId=1))

    other = session.get(TABLE, CartSessionId("session-2"))

    assert other.items == []
