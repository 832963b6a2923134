from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import SQLModel, Field

from bookshop.utils.clock import utcnow


# ---------- ENUMS ----------

class RecipientRole(str, Enum):
    admin = "admin"
    customer = "customer"


class NotificationChannel(str, Enum):
    email = "email"
    system = "system"


class NotificationStatus(str, Enum):
    sent = "sent"
    failed = "failed"


# ---------- MODEL ----------

class Notification(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)

    recipient_role: RecipientRole
    user_id: Optional[int] = None

    trigger_source: str  # order_placed / order_cancelled / ...
    related_id: Optional[int] = None  # order id

    title: str
    content: str

    channel: NotificationChannel = NotificationChannel.system
    status: NotificationStatus = NotificationStatus.sent
    is_read: bool = False

    created_at: datetime = Field(default_factory=utcnow)
