from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import UniqueConstraint
from typing import Optional, TYPE_CHECKING
from datetime import datetime

from bookshop.utils.clock import utcnow

if TYPE_CHECKING:
    from bookshop.models.book import Book


class Review(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("user_id", "book_id", name="uq_review_user_book"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    book_id: int = Field(foreign_key="book.id", index=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    rating: int
    comment: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = None

    book: Optional["Book"] = Relationship(back_populates="reviews")
