from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class BookmarkCreate(BaseModel):
    book_id: int


class BookmarkRead(BaseModel):
    id: int
    book_id: int
    title: str
    author: str
    image_url: Optional[str]
    price: float
    effective_price: float
    is_on_sale: bool
    discount_percentage: Optional[float]
    added_on: datetime
