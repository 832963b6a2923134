"""
Price and discount rules.

Everything here is a pure function of its arguments so the cart preview and
checkout apply exactly the same arithmetic. Money is ``Decimal`` rounded
half-up to cents.
"""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from bookshop.config import settings
from bookshop.utils.clock import utcnow

CENTS = Decimal("0.01")
HUNDRED = Decimal("100")


def to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def is_sale_active(book, now: Optional[datetime] = None) -> bool:
    now = now or utcnow()
    return bool(
        book.is_on_sale
        and book.discount_percentage is not None
        and book.discount_start_date is not None
        and book.discount_start_date <= now
        and (book.discount_end_date is None or book.discount_end_date >= now)
    )


def effective_unit_price(book, now: Optional[datetime] = None) -> Decimal:
    """Price charged for one copy of ``book`` at ``now``."""
    price = Decimal(str(book.price))
    if not is_sale_active(book, now):
        return to_money(price)

    percentage = Decimal(str(book.discount_percentage))
    return to_money(price * (1 - percentage / HUNDRED))


@dataclass(frozen=True)
class OrderDiscount:
    amount: Decimal
    volume_applied: bool
    loyalty_applied: bool


def qualifies_for_volume_discount(item_count: int) -> bool:
    return item_count >= settings.VOLUME_DISCOUNT_MIN_ITEMS


def compute_order_discount(
    subtotal: Decimal, item_count: int, is_loyalty_member: bool
) -> OrderDiscount:
    subtotal = Decimal(str(subtotal))
    volume = qualifies_for_volume_discount(item_count)

    percent = Decimal("0")
    if volume:
        percent += Decimal(str(settings.VOLUME_DISCOUNT_PERCENT))
    if is_loyalty_member:
        percent += Decimal(str(settings.LOYALTY_DISCOUNT_PERCENT))

    return OrderDiscount(
        amount=to_money(subtotal * percent / HUNDRED),
        volume_applied=volume,
        loyalty_applied=is_loyalty_member,
    )


def order_discount(subtotal: Decimal, item_count: int, is_loyalty_member: bool) -> Decimal:
    """Discount amount to subtract from ``subtotal``. Volume and loyalty stack."""
    return compute_order_discount(subtotal, item_count, is_loyalty_member).amount
