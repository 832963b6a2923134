from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, ForeignKey, Integer
from typing import Optional, TYPE_CHECKING
from decimal import Decimal

if TYPE_CHECKING:
    from bookshop.models.order import Order


class OrderItem(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: int = Field(foreign_key="order.id", index=True)
    # survives catalogue deletions; title and prices are captured below
    book_id: Optional[int] = Field(
        default=None,
        sa_column=Column(
            Integer,
            ForeignKey("book.id", ondelete="SET NULL"),
            nullable=True,
        ),
    )

    book_title: str
    quantity: int
    unit_price: Decimal = Field(max_digits=10, decimal_places=2)
    unit_discount: Optional[Decimal] = Field(default=None, max_digits=10, decimal_places=2)
    total_price: Decimal = Field(max_digits=10, decimal_places=2)

    order: Optional["Order"] = Relationship(back_populates="items")
