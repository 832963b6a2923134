from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime

from bookshop.utils.clock import utcnow


class Announcement(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(max_length=200)
    content: str = Field(max_length=500)

    start_date: datetime
    end_date: Optional[datetime] = None
    is_active: bool = True

    bg_color: str = "#f3f4f6"
    text_color: str = "#1f2937"

    created_by_id: Optional[int] = Field(default=None, foreign_key="user.id")
    created_at: datetime = Field(default_factory=utcnow)
