from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class OrderLineRequest(BaseModel):
    book_id: int
    quantity: int = Field(..., ge=1, le=99)


class CreateOrderRequest(BaseModel):
    items: List[OrderLineRequest]
    shipping_address: str = Field(..., min_length=1, max_length=255)
    shipping_city: str = Field(..., min_length=1, max_length=100)
    shipping_state: Optional[str] = Field(None, max_length=100)
    shipping_zip_code: str = Field(..., min_length=1, max_length=20)


class FulfillOrderRequest(BaseModel):
    claim_code: str = Field(..., min_length=1)


class OrderLine(BaseModel):
    book_id: Optional[int]
    title: str
    quantity: int
    unit_price: float
    unit_discount: Optional[float]
    total: float


class OrderTimelineEntry(BaseModel):
    event_type: str
    label: str
    created_by: str
    created_at: datetime


class OrderRead(BaseModel):
    id: int
    order_number: str
    status: str
    subtotal: float
    discount_amount: float
    shipping_cost: float
    total_amount: float
    received_volume_discount: bool
    received_loyalty_discount: bool
    claim_code: str
    shipping_address: str
    shipping_city: str
    shipping_state: Optional[str]
    shipping_zip_code: str
    created_at: datetime
    cancelled_at: Optional[datetime]
    items: List[OrderLine]


class OrderDetail(OrderRead):
    timeline: List[OrderTimelineEntry] = []


class PlaceOrderResponse(BaseModel):
    order_id: int
    order_number: str
    message: str
    claim_code: str
    subtotal: float
    discount_applied: bool
    discount_amount: float
    volume_discount: bool
    loyalty_discount: bool
    shipping_cost: float
    total_amount: float


class FulfillOrderResponse(BaseModel):
    message: str
    order: OrderRead
    successful_orders: int
    has_loyalty_discount: bool


class AdminOrderRow(BaseModel):
    order_id: int
    order_number: str
    customer_email: str
    status: str
    total_amount: float
    created_at: datetime


class AdminOrderList(BaseModel):
    total_items: int
    total_pages: int
    current_page: int
    results: List[AdminOrderRow]
