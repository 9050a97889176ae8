from __future__ import annotations

import logging
from typing import Any

from cafeorder.application.dto.responses import CheckoutResponse
from cafeorder.application.mappers.order_mapper import (
    to_order_response,
    to_stock_warning_responses,
)
from cafeorder.application.metrics.order_lifecycle import (
    record_checkout_rejected,
    record_order_placed,
)
from cafeorder.application.ports.carts import CartRepository
from cafeorder.application.ports.change_feed import ChangeEvent
from cafeorder.application.ports.publisher import ChangePublisher
from cafeorder.application.ports.repositories import (
    MenuQuery,
    MenuRepository,
    NewOrderItem,
    OrderRepository,
    TableRepository,
)
from cafeorder.application.use_cases.context import TraceContext
from cafeorder.application.use_cases.errors import MenuItemUnavailableError, TableNotFoundError
from cafeorder.application.use_cases.notify import publish_order_change
from cafeorder.application.use_cases.stock import StockWarning, adjust_stock_with_retry
from cafeorder.domain.cart.entities import Cart
from cafeorder.domain.common.ids import CartSessionId, OrderId, TableId
from cafeorder.domain.menu.entities import MenuItem

logger = logging.getLogger(__name__)


class EmptyCartError(Exception):
    pass


class StockInsufficientError(Exception):
    def __init__(self, item: MenuItem, available: int, requested: int) -> None:
        super().__init__(
            f"insufficient stock for {item.name}: available={available}, requested={requested}"
        )
        self.details: dict[str, Any] = {
            "menuId": int(item.item_id),
            "name": item.name,
            "available": available,
            "requested": requested,
        }


class OrderPersistenceError(Exception):
    def __init__(self, message: str, order_id: OrderId | None = None) -> None:
        super().__init__(message)
        self.details: dict[str, Any] = {"orderId": int(order_id)} if order_id is not None else {}


class PlaceOrder:
    """Turn a cart into a persisted order.

    Steps run in sequence with no transaction spanning them: validate,
    re-check tracked stock, insert the order, insert its items, then consume
    stock. A failed stock decrement after the items are stored leaves the
    order placed and is reported back as a warning.
    """

    def __init__(
        self,
        menu_repository: MenuRepository,
        table_repository: TableRepository,
        order_repository: OrderRepository,
        publisher: ChangePublisher,
    ) -> None:
        self._menu_repository = menu_repository
        self._table_repository = table_repository
        self._order_repository = order_repository
        self._publisher = publisher

    def execute(
        self,
        table_id: TableId,
        cart: Cart,
        notes: str | None,
        trace_ctx: TraceContext,
    ) -> CheckoutResponse:
        table = self._table_repository.get(table_id)
        if table is None or not table.is_active:
            record_checkout_rejected("table_not_found")
            raise TableNotFoundError(f"table {table_id} not found or inactive")

        if cart.is_empty:
            record_checkout_rejected("empty_cart")
            raise EmptyCartError("cart is empty")

        current_items = {
            item.item_id: item
            for item in self._menu_repository.query_menus(
                MenuQuery(menu_ids=frozenset(line.menu_id for line in cart.items))
            )
        }
        for line in cart.items:
            current = current_items.get(line.menu_id)
            if current is None or not current.is_available:
                record_checkout_rejected("menu_item_unavailable")
                raise MenuItemUnavailableError(
                    f"menu item {line.menu_item.name} is no longer available"
                )

        # advisory: the conditional decrement below is what keeps stock >= 0
        for line in cart.items:
            current = current_items[line.menu_id]
            if not current.tracks_stock:
                continue
            available = self._menu_repository.read_stock(line.menu_id)
            if available is not None and available < line.quantity:
                record_checkout_rejected("stock_insufficient")
                raise StockInsufficientError(current, available, line.quantity)

        special_notes = notes.strip() if notes and notes.strip() else None
        try:
            order_id = self._order_repository.create_order(
                table_id=table_id,
                total_amount=cart.total,
                special_notes=special_notes,
            )
        except Exception as exc:
            logger.exception("order_create_failed", extra={"table_id": table_id})
            raise OrderPersistenceError("failed to create order") from exc

        try:
            self._order_repository.create_order_items(
                [
                    NewOrderItem(
                        order_id=order_id,
                        menu_id=line.menu_id,
                        quantity=line.quantity,
                        price=line.menu_item.price,
                        special_notes=line.special_notes,
                    )
                    for line in cart.items
                ]
            )
        except Exception as exc:
            logger.error(
                "orphaned_order",
                extra={"order_id": order_id, "table_id": table_id, "error": str(exc)},
            )
            raise OrderPersistenceError(
                f"failed to store items for order {order_id}", order_id=order_id
            ) from exc

        # the order stands even when a racing checkout took the last units
        warnings: list[StockWarning] = []
        for line in cart.items:
            if not current_items[line.menu_id].tracks_stock:
                continue
            warning = adjust_stock_with_retry(
                self._menu_repository,
                line.menu_id,
                -line.quantity,
                order_id=order_id,
            )
            if warning is not None:
                warnings.append(warning)

        order = self._order_repository.get(order_id)
        if order is None:
            raise OrderPersistenceError(f"order {order_id} vanished after insert", order_id=order_id)

        record_order_placed(order)
        logger.info(
            "order_placed",
            extra={
                "order_id": order_id,
                "table_id": table_id,
                "total_amount": order.total_amount,
                "stock_warnings": len(warnings),
            },
        )
        publish_order_change(self._publisher, ChangeEvent.INSERT, order, trace_ctx)

        return CheckoutResponse(
            order=to_order_response(order),
            stockWarnings=to_stock_warning_responses(warnings),
        )


class CheckoutCart:
    def __init__(self, carts: CartRepository, place_order: PlaceOrder) -> None:
        self._carts = carts
        self._place_order = place_order

    def execute(
        self,
        table_id: TableId,
        session_id: CartSessionId,
        notes: str | None,
        trace_ctx: TraceContext,
    ) -> CheckoutResponse:
        cart = self._carts.load(table_id, session_id)
        response = self._place_order.execute(table_id, cart, notes, trace_ctx)
        self._carts.discard(table_id, session_id)
        return response
