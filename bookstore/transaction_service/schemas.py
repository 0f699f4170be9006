from datetime import datetime
from decimal import Decimal
from typing import List

from pydantic import BaseModel


class CheckoutItem(BaseModel):
    book_id: str
    quantity: int


class CheckoutRequest(BaseModel):
    # Emptiness is checked by the checkout service so it reports InvalidRequest
    items: List[CheckoutItem] = []


class BookProjection(BaseModel):
    id: str
    title: str
    price: Decimal
    writer: str

    class Config:
        from_attributes = True


class OrderItemResponse(BaseModel):
    id: str
    order_id: str
    book_id: str
    quantity: int
    subtotal: Decimal
    book: BookProjection

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    id: str
    user_id: str
    total_price: Decimal
    created_at: datetime
    items: List[OrderItemResponse]

    class Config:
        from_attributes = True


class TopSellingBook(BaseModel):
    book_id: str
    quantity: int
    book_title: str
    writer: str


class StatisticsResponse(BaseModel):
    totalOrders: int
    totalRevenue: str
    topSellingBooks: List[TopSellingBook]
