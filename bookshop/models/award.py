from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, List, TYPE_CHECKING
from datetime import datetime

from bookshop.utils.clock import utcnow

if TYPE_CHECKING:
    from bookshop.models.book import Book


class Award(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=255)
    description: Optional[str] = None
    organization: Optional[str] = Field(default=None, max_length=255)
    created_at: datetime = Field(default_factory=utcnow)

    books: List["BookAward"] = Relationship(back_populates="award")


class BookAward(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    book_id: int = Field(foreign_key="book.id", index=True)
    award_id: int = Field(foreign_key="award.id", index=True)
    year: Optional[int] = None

    book: Optional["Book"] = Relationship(back_populates="awards")
    award: Optional[Award] = Relationship(back_populates="books")
