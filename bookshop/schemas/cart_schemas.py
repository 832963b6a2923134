from pydantic import BaseModel, Field
from typing import List, Optional


class CartAddRequest(BaseModel):
    book_id: int
    quantity: int = Field(default=1, ge=1, le=99)


class CartUpdateRequest(BaseModel):
    # zero or negative removes the line
    quantity: int = Field(..., le=99)


class CartLine(BaseModel):
    item_id: int
    book_id: int
    title: str
    author: str
    image_url: Optional[str]
    price: float
    unit_price: float
    is_on_sale: bool
    quantity: int
    stock: int
    in_stock: bool
    subtotal: float


class CartSummary(BaseModel):
    items: List[CartLine]
    total_items: int
    subtotal: float
    discount_amount: float
    total: float
    has_volume_discount: bool
    has_loyalty_discount: bool
