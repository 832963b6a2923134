import logging

from sqlalchemy import update
from sqlmodel import Session, select

from bookshop.exceptions import InsufficientStockError
from bookshop.models.book import Book
from bookshop.models.order_item import OrderItem

logger = logging.getLogger(__name__)


def reserve_stock(session: Session, book: Book, quantity: int):
    """
    Decrement stock only if enough is left, in a single UPDATE.

    Does not commit; the caller's transaction owns the change and a raised
    ``InsufficientStockError`` is expected to roll it back.
    """
    result = session.execute(
        update(Book)
        .where(Book.id == book.id, Book.stock >= quantity)
        .values(stock=Book.stock - quantity)
        .execution_options(synchronize_session=False)
    )

    if result.rowcount != 1:
        logger.info(f"Stock reservation refused for book {book.id}: requested {quantity}")
        raise InsufficientStockError(
            f"Insufficient stock for {book.title!r}. Requested: {quantity}"
        )


def restock_order_items(session: Session, order_id: int) -> int:
    """Put the units of a cancelled order back on the shelf."""
    order_items = session.exec(
        select(OrderItem).where(OrderItem.order_id == order_id)
    ).all()

    restocked = 0
    for item in order_items:
        if item.book_id is None:
            continue
        session.execute(
            update(Book)
            .where(Book.id == item.book_id)
            .values(stock=Book.stock + item.quantity)
            .execution_options(synchronize_session=False)
        )
        restocked += 1

    logger.info(f"Restocked {restocked} lines for order {order_id}")
    return restocked
