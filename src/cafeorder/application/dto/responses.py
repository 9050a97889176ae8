from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field


class MenuItemResponse(BaseModel):
    menuId: int
    name: str
    description: str | None = None
    price: int
    priceLabel: str
    category: str
    isAvailable: bool
    isOrderable: bool
    stockQuantity: int | None = None
    imageUrl: str
    createdAt: datetime | None = None
    updatedAt: datetime | None = None


class MenuResponse(BaseModel):
    categories: list[str] = Field(default_factory=list)
    items: list[MenuItemResponse] = Field(default_factory=list)


class CartItemResponse(BaseModel):
    menuId: int
    name: str
    price: int
    quantity: int
    lineTotal: int
    specialNotes: str | None = None


class CartResponse(BaseModel):
    tableId: int
    sessionId: str
    items: list[CartItemResponse] = Field(default_factory=list)
    itemCount: int
    total: int


class OrderItemResponse(BaseModel):
    orderItemId: int | None = None
    menuId: int
    name: str | None = None
    quantity: int
    price: int
    lineTotal: int
    specialNotes: str | None = None


class OrderResponse(BaseModel):
    orderId: int
    tableId: int
    status: str
    totalAmount: int
    specialNotes: str | None = None
    createdAt: datetime
    updatedAt: datetime | None = None
    items: list[OrderItemResponse] = Field(default_factory=list)
    nextStatus: str | None = None
    nextActionLabel: str | None = None


class StockWarningResponse(BaseModel):
    menuId: int
    delta: int
    error: str


class CheckoutResponse(BaseModel):
    order: OrderResponse
    stockWarnings: list[StockWarningResponse] = Field(default_factory=list)


class OrderStatusChangeResponse(BaseModel):
    order: OrderResponse
    cue: str
    stockWarnings: list[StockWarningResponse] = Field(default_factory=list)


class OrderBoardResponse(BaseModel):
    orders: list[OrderResponse] = Field(default_factory=list)
    pendingCount: int
    cue: str | None = None


class TableOrdersResponse(BaseModel):
    orders: list[OrderResponse] = Field(default_factory=list)


class TableResponse(BaseModel):
    tableId: int
    tableNumber: int
    qrToken: str
    isActive: bool
    createdAt: datetime | None = None


class TableListResponse(BaseModel):
    tables: list[TableResponse] = Field(default_factory=list)


class TableQrResponse(BaseModel):
    tableId: int
    tableNumber: int
    qrToken: str
    url: str


class PopularItemResponse(BaseModel):
    name: str
    category: str | None = None
    totalQuantity: int
    totalRevenue: int


class DailyReportResponse(BaseModel):
    reportDate: date
    totalOrders: int
    totalRevenue: int
    averageOrderValue: float
    popularItems: list[PopularItemResponse] = Field(default_factory=list)


class ReconcileResponse(BaseModel):
    cancelledOrderIds: list[int] = Field(default_factory=list)
