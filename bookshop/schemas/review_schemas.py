from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime


class ReviewCreate(BaseModel):
    book_id: int
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=2000)


class ReviewUpdate(BaseModel):
    rating: Optional[int] = Field(None, ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=2000)


class ReviewRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    book_id: int
    user_id: int
    user_name: str = ""
    rating: int
    comment: Optional[str]
    created_at: datetime
    updated_at: Optional[datetime] = None


class BookReviews(BaseModel):
    book_id: int
    average_rating: float
    total_reviews: int
    reviews: List[ReviewRead]
