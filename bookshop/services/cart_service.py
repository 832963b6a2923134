import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import delete, func
from sqlmodel import Session, select

from bookshop.exceptions import InsufficientStockError, NotFoundError
from bookshop.models.book import Book
from bookshop.models.cart import CartItem
from bookshop.models.user import User
from bookshop.schemas.cart_schemas import CartLine, CartSummary
from bookshop.services.pricing import (
    compute_order_discount,
    effective_unit_price,
    is_sale_active,
    to_money,
)
from bookshop.utils.clock import utcnow

logger = logging.getLogger(__name__)


def _get_owned_item(session: Session, user: User, item_id: int) -> CartItem:
    item = session.get(CartItem, item_id)
    if not item or item.user_id != user.id:
        raise NotFoundError("Cart item not found")
    return item


def add_item(session: Session, user: User, book_id: int, quantity: int) -> CartItem:
    book = session.get(Book, book_id)
    if not book:
        raise NotFoundError("Book not found")

    existing_item = session.exec(
        select(CartItem).where(
            CartItem.user_id == user.id,
            CartItem.book_id == book_id,
        )
    ).first()

    requested = quantity + (existing_item.quantity if existing_item else 0)
    if requested > book.stock:
        raise InsufficientStockError(
            f"Only {book.stock} copies of {book.title!r} available"
        )

    if existing_item:
        existing_item.quantity = requested
        item = existing_item
    else:
        item = CartItem(user_id=user.id, book_id=book.id, quantity=quantity)

    session.add(item)
    session.commit()
    session.refresh(item)
    return item


def update_item(session: Session, user: User, item_id: int, quantity: int) -> Optional[CartItem]:
    """Set a line's quantity. Returns None when the line was removed."""
    item = _get_owned_item(session, user, item_id)

    if quantity <= 0:
        session.delete(item)
        session.commit()
        return None

    book = session.get(Book, item.book_id)
    if quantity > book.stock:
        raise InsufficientStockError(
            f"Only {book.stock} copies of {book.title!r} available"
        )

    item.quantity = quantity
    session.add(item)
    session.commit()
    session.refresh(item)
    return item


def remove_item(session: Session, user: User, item_id: int):
    item = _get_owned_item(session, user, item_id)
    session.delete(item)
    session.commit()


def clear_cart(session: Session, user_id: int):
    session.execute(delete(CartItem).where(CartItem.user_id == user_id))
    session.commit()


def remove_books_from_cart(session: Session, user_id: int, book_ids):
    """Drop the given books from a user's cart. Does not commit."""
    if not book_ids:
        return
    session.execute(
        delete(CartItem).where(
            CartItem.user_id == user_id,
            CartItem.book_id.in_(list(book_ids)),
        )
    )


def cart_count(session: Session, user: User) -> int:
    total = session.exec(
        select(func.coalesce(func.sum(CartItem.quantity), 0)).where(
            CartItem.user_id == user.id
        )
    ).one()
    return int(total)


def get_cart(session: Session, user: User, now: Optional[datetime] = None) -> CartSummary:
    now = now or utcnow()
    rows = session.exec(
        select(CartItem, Book)
        .join(Book, CartItem.book_id == Book.id)
        .where(CartItem.user_id == user.id)
        .order_by(CartItem.created_at, CartItem.id)
    ).all()

    lines = []
    subtotal = Decimal("0")
    total_items = 0

    for cart_item, book in rows:
        unit_price = effective_unit_price(book, now)
        line_total = to_money(unit_price * cart_item.quantity)
        subtotal += line_total
        total_items += cart_item.quantity

        lines.append(
            CartLine(
                item_id=cart_item.id,
                book_id=book.id,
                title=book.title,
                author=book.author,
                image_url=book.image_url,
                price=float(book.price),
                unit_price=float(unit_price),
                is_on_sale=is_sale_active(book, now),
                quantity=cart_item.quantity,
                stock=book.stock,
                in_stock=book.in_stock,
                subtotal=float(line_total),
            )
        )

    discount = compute_order_discount(subtotal, total_items, user.has_loyalty_discount)
    total = to_money(subtotal - discount.amount)

    return CartSummary(
        items=lines,
        total_items=total_items,
        subtotal=float(to_money(subtotal)),
        discount_amount=float(discount.amount),
        total=float(total),
        has_volume_discount=discount.volume_applied,
        has_loyalty_discount=discount.loyalty_applied,
    )
