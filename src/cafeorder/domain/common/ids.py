from __future__ import annotations

from typing import NewType

MenuItemId = NewType("MenuItemId", int)
TableId = NewType("TableId", int)
OrderId = NewType("OrderId", int)
OrderItemId = NewType("OrderItemId", int)
CartSessionId = NewType("CartSessionId", str)
