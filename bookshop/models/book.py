from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, TYPE_CHECKING, List
from datetime import datetime
from decimal import Decimal

from bookshop.models.review import Review
from bookshop.utils.clock import utcnow

if TYPE_CHECKING:
    from .award import BookAward


class Book(SQLModel, table=True):
    #main info
    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(max_length=255, index=True)
    slug: str = Field(index=True)
    author: str = Field(max_length=255, index=True)
    description: str
    isbn: str = Field(index=True)
    genre: str = Field(max_length=100, index=True)

    #publication
    publisher: Optional[str] = None
    publish_date: Optional[datetime] = None
    language: str = "English"
    format: str = "Paperback"
    pages: Optional[int] = None
    dimensions: Optional[str] = None
    weight: Optional[str] = None
    image_url: Optional[str] = None

    #shop details
    price: Decimal = Field(max_digits=10, decimal_places=2)
    original_price: Optional[Decimal] = Field(default=None, max_digits=10, decimal_places=2)
    stock: int = 0

    #flags
    is_bestseller: bool = False
    is_new_release: bool = False

    #timed sale
    is_on_sale: bool = False
    discount_percentage: Optional[Decimal] = Field(default=None, max_digits=5, decimal_places=2)
    discount_start_date: Optional[datetime] = None
    discount_end_date: Optional[datetime] = None

    #timestamps
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    reviews: List["Review"] = Relationship(
        back_populates="book",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )
    awards: List["BookAward"] = Relationship(
        back_populates="book",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )

    @property
    def in_stock(self) -> bool:
        return self.stock is not None and self.stock > 0
