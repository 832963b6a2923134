from sqlmodel import SQLModel, Field, Relationship
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

from bookshop.constants.order_status import OrderStatus
from bookshop.models.order_item import OrderItem
from bookshop.utils.clock import utcnow


class Order(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    order_number: str = Field(max_length=20, unique=True, index=True)

    subtotal: Decimal = Field(max_digits=10, decimal_places=2)
    discount_amount: Decimal = Field(default=Decimal("0.00"), max_digits=10, decimal_places=2)
    shipping_cost: Decimal = Field(max_digits=10, decimal_places=2)
    total_amount: Decimal = Field(max_digits=10, decimal_places=2)
    received_volume_discount: bool = False
    received_loyalty_discount: bool = False

    status: OrderStatus = Field(default=OrderStatus.pending, index=True)

    shipping_address: str = Field(max_length=255)
    shipping_city: str = Field(max_length=100)
    shipping_state: Optional[str] = Field(default=None, max_length=100)
    shipping_zip_code: str = Field(max_length=20)

    # pickup / fulfilment
    claim_code: str = Field(max_length=10, unique=True, index=True)
    is_claim_code_used: bool = False
    claim_code_used_at: Optional[datetime] = None
    claim_code_used_by_id: Optional[int] = Field(default=None, foreign_key="user.id")

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None

    items: List["OrderItem"] = Relationship(
        back_populates="order",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )
