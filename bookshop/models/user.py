from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from enum import Enum

from bookshop.config import settings
from bookshop.utils.clock import utcnow


class UserRole(str, Enum):
    member = "member"
    admin = "admin"
    staff = "staff"


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    first_name: str
    last_name: str
    email: str = Field(index=True, unique=True)
    password: str
    role: UserRole = Field(default=UserRole.member)
    can_login: bool = Field(default=True)

    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None

    member_since: datetime = Field(default_factory=utcnow)
    successful_order_count: int = Field(default=0)

    @property
    def has_loyalty_discount(self) -> bool:
        return self.successful_order_count >= settings.LOYALTY_MIN_ORDERS
