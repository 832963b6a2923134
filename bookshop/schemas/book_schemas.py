from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Optional, List
from datetime import datetime
from decimal import Decimal

from bookshop.utils.clock import to_naive_utc


class BookCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    slug: Optional[str] = None
    author: str = Field(..., min_length=1, max_length=255)
    description: str
    isbn: str = Field(..., min_length=1, max_length=20)
    genre: str = Field(..., min_length=1, max_length=100)

    publisher: Optional[str] = None
    publish_date: Optional[datetime] = None
    language: str = "English"
    format: str = "Paperback"
    pages: Optional[int] = Field(None, gt=0)
    dimensions: Optional[str] = None
    weight: Optional[str] = None
    image_url: Optional[str] = None

    price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    original_price: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)
    stock: int = Field(default=0, ge=0)

    is_bestseller: bool = False
    is_new_release: bool = False

    is_on_sale: bool = False
    discount_percentage: Optional[Decimal] = Field(None, gt=0, le=100)
    discount_start_date: Optional[datetime] = None
    discount_end_date: Optional[datetime] = None

    @field_validator("publish_date", "discount_start_date", "discount_end_date")
    @classmethod
    def normalize_dates(cls, value):
        return to_naive_utc(value)

    @model_validator(mode="after")
    def validate_discount_window(self):
        if (
            self.discount_start_date
            and self.discount_end_date
            and self.discount_end_date < self.discount_start_date
        ):
            raise ValueError("discount_end_date must not be before discount_start_date")
        return self


class BookUpdate(BaseModel):
    """
    Patch document: only fields present in the request are applied.

    A field sent as ``null`` clears a nullable column; an omitted field is
    left untouched. Routes read it with ``model_dump(exclude_unset=True)``.
    """
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    slug: Optional[str] = None
    author: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    isbn: Optional[str] = Field(None, min_length=1, max_length=20)
    genre: Optional[str] = Field(None, min_length=1, max_length=100)

    publisher: Optional[str] = None
    publish_date: Optional[datetime] = None
    language: Optional[str] = None
    format: Optional[str] = None
    pages: Optional[int] = Field(None, gt=0)
    dimensions: Optional[str] = None
    weight: Optional[str] = None
    image_url: Optional[str] = None

    price: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)
    original_price: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)
    stock: Optional[int] = Field(None, ge=0)

    is_bestseller: Optional[bool] = None
    is_new_release: Optional[bool] = None

    is_on_sale: Optional[bool] = None
    discount_percentage: Optional[Decimal] = Field(None, gt=0, le=100)
    discount_start_date: Optional[datetime] = None
    discount_end_date: Optional[datetime] = None

    @field_validator("publish_date", "discount_start_date", "discount_end_date")
    @classmethod
    def normalize_dates(cls, value):
        return to_naive_utc(value)


class InventoryUpdate(BaseModel):
    quantity: int = Field(..., ge=0)


class DiscountUpdate(BaseModel):
    is_on_sale: bool = True
    discount_percentage: Decimal = Field(..., gt=0, le=100)
    start_date: datetime
    end_date: Optional[datetime] = None

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, value):
        return to_naive_utc(value)

    @model_validator(mode="after")
    def validate_window(self):
        if self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class BookListItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    slug: str
    author: str
    isbn: str
    description: str
    genre: str
    language: str
    format: str
    publisher: Optional[str]
    publish_date: Optional[datetime]
    image_url: Optional[str]

    price: float
    original_price: Optional[float]
    effective_price: float
    stock: int
    in_stock: bool

    is_bestseller: bool
    is_on_sale: bool
    discount_percentage: Optional[float]
    discount_start_date: Optional[datetime]
    discount_end_date: Optional[datetime]

    is_bookmarked: bool = False


class BookDetail(BookListItem):
    pages: Optional[int]
    dimensions: Optional[str]
    weight: Optional[str]

    is_new_release: bool
    is_new_arrival: bool
    is_coming_soon: bool
    is_award_winner: bool
    awards: List[str] = []

    average_rating: float
    review_count: int

    created_at: datetime
    updated_at: datetime


class BookFacets(BaseModel):
    genres: List[str]
    authors: List[str]
    languages: List[str]
    publishers: List[str]
    formats: List[str]


class BookListResponse(BaseModel):
    items: List[BookListItem]
    total_count: int
    total_pages: int
    current_page: int
    page_size: int
    facets: BookFacets
