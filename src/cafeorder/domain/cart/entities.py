from __future__ import annotations

from dataclasses import dataclass, field, replace

from cafeorder.domain.common.ids import MenuItemId
from cafeorder.domain.menu.entities import MenuItem


@dataclass(frozen=True)
class CartItem:
    menu_item: MenuItem
    quantity: int
    special_notes: str | None = None

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValueError("quantity must be >= 1")

    @property
    def menu_id(self) -> MenuItemId:
        return self.menu_item.item_id

    @property
    def line_total(self) -> int:
        return self.menu_item.price * self.quantity


@dataclass(frozen=True)
class Cart:
    """Ephemeral selection for one table session.

    Every operation returns a new cart whose total is recomputed from the
    items, so the total can never drift from its lines.
    """

    items: tuple[CartItem, ...] = ()
    total: int = field(init=False, default=0)

    def __post_init__(self) -> None:
        object.__setattr__(self, "total", calculate_total(self.items))

    @property
    def is_empty(self) -> bool:
        return not self.items

    def find(self, menu_id: MenuItemId) -> CartItem | None:
        for item in self.items:
            if item.menu_id == menu_id:
                return item
        return None

    def add_item(
        self,
        menu_item: MenuItem,
        quantity: int,
        notes: str | None = None,
    ) -> Cart:
        if self.find(menu_item.item_id) is not None:
            items = tuple(
                replace(item, quantity=item.quantity + quantity)
                if item.menu_id == menu_item.item_id
                else item
                for item in self.items
            )
            return _with_items(items)

        new_item = CartItem(menu_item=menu_item, quantity=quantity, special_notes=notes)
        return _with_items(self.items + (new_item,))

    def remove_item(self, menu_id: MenuItemId) -> Cart:
        return _with_items(tuple(item for item in self.items if item.menu_id != menu_id))

    def update_quantity(self, menu_id: MenuItemId, quantity: int) -> Cart:
        if quantity <= 0:
            return self.remove_item(menu_id)
        items = tuple(
            replace(item, quantity=quantity) if item.menu_id == menu_id else item
            for item in self.items
        )
        return _with_items(items)

    def update_notes(self, menu_id: MenuItemId, notes: str | None) -> Cart:
        cleaned = notes or None
        items = tuple(
            replace(item, special_notes=cleaned) if item.menu_id == menu_id else item
            for item in self.items
        )
        return _with_items(items)

    def clear(self) -> Cart:
        return Cart()


def calculate_total(items: tuple[CartItem, ...]) -> int:
    return sum(item.menu_item.price * item.quantity for item in items)


def _with_items(items: tuple[CartItem, ...]) -> Cart:
    return Cart(items=items)
