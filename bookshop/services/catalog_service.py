"""
Catalogue queries and admin book maintenance.

``list_books`` turns a ``BookFilter`` into one SQL query: the total is
counted on the filtered query before sorting and pagination are applied.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import List, Optional

from slugify import slugify
from sqlalchemy import and_, delete, func, or_, update
from sqlmodel import Session, select

from bookshop.constants.order_status import OrderStatus
from bookshop.exceptions import NotFoundError
from bookshop.models.award import Award, BookAward
from bookshop.models.book import Book
from bookshop.models.bookmark import Bookmark
from bookshop.models.cart import CartItem
from bookshop.models.order import Order
from bookshop.models.order_item import OrderItem
from bookshop.models.review import Review
from bookshop.models.user import User
from bookshop.schemas.book_schemas import (
    BookCreate,
    BookDetail,
    BookFacets,
    BookListItem,
    BookListResponse,
    BookUpdate,
    DiscountUpdate,
)
from bookshop.services.pricing import effective_unit_price, is_sale_active
from bookshop.utils.clock import utcnow
from bookshop.utils.pagination import normalize_page, total_pages

logger = logging.getLogger(__name__)

NEW_RELEASE_WINDOW = timedelta(days=90)
NEW_ARRIVAL_WINDOW = timedelta(days=30)


class SortKey(str, Enum):
    title = "title"
    author = "author"
    price = "price"
    publication_date = "publication_date"
    popularity = "popularity"


@dataclass
class BookFilter:
    search: Optional[str] = None
    authors: List[str] = field(default_factory=list)
    genres: List[str] = field(default_factory=list)
    languages: List[str] = field(default_factory=list)
    publishers: List[str] = field(default_factory=list)
    formats: List[str] = field(default_factory=list)
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    in_stock: bool = False
    on_sale: bool = False
    new_release: bool = False
    new_arrival: bool = False
    coming_soon: bool = False
    award_winner: bool = False
    bestseller: bool = False
    min_rating: Optional[float] = None
    sort_by: SortKey = SortKey.title
    desc: bool = False
    page: int = 1
    page_size: int = 10


# ---------------------------------------------------------
# Query building
# ---------------------------------------------------------

def _facet(column, values: List[str]):
    wanted = [v.lower() for v in values if v and v.strip()]
    return func.lower(column).in_(wanted)


def sale_active_clause(now: datetime):
    return and_(
        Book.is_on_sale == True,  # noqa: E712
        Book.discount_percentage.is_not(None),
        Book.discount_start_date.is_not(None),
        Book.discount_start_date <= now,
        or_(Book.discount_end_date.is_(None), Book.discount_end_date >= now),
    )


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def apply_filters(query, filters: BookFilter, now: datetime):
    if filters.search:
        like = f"%{_escape_like(filters.search.strip())}%"
        query = query.where(
            Book.title.ilike(like, escape="\\")
            | Book.author.ilike(like, escape="\\")
            | Book.isbn.ilike(like, escape="\\")
            | Book.description.ilike(like, escape="\\")
        )

    if filters.authors:
        query = query.where(_facet(Book.author, filters.authors))
    if filters.genres:
        query = query.where(_facet(Book.genre, filters.genres))
    if filters.languages:
        query = query.where(_facet(Book.language, filters.languages))
    if filters.publishers:
        query = query.where(_facet(Book.publisher, filters.publishers))
    if filters.formats:
        query = query.where(_facet(Book.format, filters.formats))

    if filters.min_price is not None:
        query = query.where(Book.price >= filters.min_price)
    if filters.max_price is not None:
        query = query.where(Book.price <= filters.max_price)

    if filters.in_stock:
        query = query.where(Book.stock > 0)

    if filters.on_sale:
        query = query.where(sale_active_clause(now))

    if filters.new_release:
        query = query.where(
            or_(
                Book.is_new_release == True,  # noqa: E712
                Book.publish_date >= now - NEW_RELEASE_WINDOW,
            )
        )

    if filters.new_arrival:
        query = query.where(Book.created_at >= now - NEW_ARRIVAL_WINDOW)

    if filters.coming_soon:
        query = query.where(Book.publish_date > now)

    if filters.award_winner:
        query = query.where(Book.id.in_(select(BookAward.book_id)))

    if filters.bestseller:
        query = query.where(Book.is_bestseller == True)  # noqa: E712

    if filters.min_rating is not None:
        rated = (
            select(Review.book_id)
            .group_by(Review.book_id)
            .having(func.avg(Review.rating) >= filters.min_rating)
        )
        query = query.where(Book.id.in_(rated))

    return query


def apply_sort(query, sort_by: SortKey, desc: bool):
    def direction(column):
        return column.desc() if desc else column.asc()

    if sort_by == SortKey.popularity:
        units_sold = (
            select(
                OrderItem.book_id.label("book_id"),
                func.sum(OrderItem.quantity).label("units"),
            )
            .join(Order, Order.id == OrderItem.order_id)
            .where(Order.status != OrderStatus.cancelled)
            .group_by(OrderItem.book_id)
            .subquery()
        )
        units = func.coalesce(units_sold.c.units, 0)
        query = query.outerjoin(units_sold, units_sold.c.book_id == Book.id)
        return query.order_by(direction(units), Book.title, Book.id)

    if sort_by == SortKey.author:
        return query.order_by(direction(Book.author), Book.title, Book.id)

    if sort_by == SortKey.price:
        return query.order_by(direction(Book.price), Book.title, Book.id)

    if sort_by == SortKey.publication_date:
        return query.order_by(direction(Book.publish_date).nulls_last(), Book.title, Book.id)

    return query.order_by(direction(Book.title), Book.id)


def catalog_facets(session: Session) -> BookFacets:
    def distinct(column) -> List[str]:
        return [
            v for v in session.exec(
                select(column).where(column.is_not(None), column != "").distinct().order_by(column)
            ).all()
        ]

    return BookFacets(
        genres=distinct(Book.genre),
        authors=distinct(Book.author),
        languages=distinct(Book.language),
        publishers=distinct(Book.publisher),
        formats=distinct(Book.format),
    )


def list_genres(session: Session) -> List[str]:
    return session.exec(
        select(Book.genre).where(Book.genre != "").distinct().order_by(Book.genre)
    ).all()


# ---------------------------------------------------------
# Response shaping
# ---------------------------------------------------------

def bookmarked_ids(session: Session, viewer: Optional[User], book_ids: List[int]) -> set:
    if viewer is None or not book_ids:
        return set()

    return set(
        session.exec(
            select(Bookmark.book_id).where(
                Bookmark.user_id == viewer.id,
                Bookmark.book_id.in_(book_ids),
            )
        ).all()
    )


def to_list_item(book: Book, now: datetime, is_bookmarked: bool = False) -> BookListItem:
    return BookListItem.model_validate(
        {
            **book.model_dump(),
            "in_stock": book.in_stock,
            "effective_price": effective_unit_price(book, now),
            "is_on_sale": is_sale_active(book, now),
            "is_bookmarked": is_bookmarked,
        }
    )


def list_books(
    session: Session,
    filters: BookFilter,
    viewer: Optional[User] = None,
    now: Optional[datetime] = None,
) -> BookListResponse:
    now = now or utcnow()
    page, page_size = normalize_page(filters.page, filters.page_size)

    query = apply_filters(select(Book), filters, now)

    total = session.exec(
        select(func.count()).select_from(query.subquery())
    ).one()

    query = apply_sort(query, filters.sort_by, filters.desc)
    books = session.exec(
        query.offset((page - 1) * page_size).limit(page_size)
    ).all()

    marked = bookmarked_ids(session, viewer, [b.id for b in books])

    return BookListResponse(
        items=[to_list_item(b, now, b.id in marked) for b in books],
        total_count=total,
        total_pages=total_pages(total, page_size),
        current_page=page,
        page_size=page_size,
        facets=catalog_facets(session),
    )


def build_book_detail(
    session: Session,
    book: Book,
    viewer: Optional[User] = None,
    now: Optional[datetime] = None,
) -> BookDetail:
    now = now or utcnow()

    avg_rating, review_count = session.exec(
        select(func.avg(Review.rating), func.count(Review.id)).where(Review.book_id == book.id)
    ).one()

    awards = session.exec(
        select(Award.name)
        .join(BookAward, BookAward.award_id == Award.id)
        .where(BookAward.book_id == book.id)
        .order_by(Award.name)
    ).all()

    is_bookmarked = book.id in bookmarked_ids(session, viewer, [book.id])
    published_recently = book.publish_date is not None and book.publish_date >= now - NEW_RELEASE_WINDOW

    return BookDetail.model_validate(
        {
            **to_list_item(book, now, is_bookmarked).model_dump(),
            "pages": book.pages,
            "dimensions": book.dimensions,
            "weight": book.weight,
            "is_new_release": book.is_new_release or published_recently,
            "is_new_arrival": book.created_at >= now - NEW_ARRIVAL_WINDOW,
            "is_coming_soon": book.publish_date is not None and book.publish_date > now,
            "is_award_winner": bool(awards),
            "awards": list(awards),
            "average_rating": round(float(avg_rating), 2) if avg_rating is not None else 0.0,
            "review_count": review_count or 0,
            "created_at": book.created_at,
            "updated_at": book.updated_at,
        }
    )


def get_book_or_404(session: Session, book_id: int) -> Book:
    book = session.get(Book, book_id)
    if not book:
        raise NotFoundError("Book not found")
    return book


def get_book_by_slug(session: Session, slug: str) -> Book:
    book = session.exec(select(Book).where(Book.slug == slug)).first()
    if not book:
        raise NotFoundError("Book not found")
    return book


# ---------------------------------------------------------
# Admin maintenance
# ---------------------------------------------------------

def unique_slug(session: Session, title: str, exclude_id: Optional[int] = None) -> str:
    base = slugify(title) or "book"
    candidate = base
    suffix = 2

    while True:
        query = select(Book.id).where(Book.slug == candidate)
        if exclude_id is not None:
            query = query.where(Book.id != exclude_id)
        if session.exec(query).first() is None:
            return candidate
        candidate = f"{base}-{suffix}"
        suffix += 1


def create_book(session: Session, data: BookCreate) -> Book:
    values = data.model_dump()
    values["slug"] = unique_slug(session, data.slug or data.title)
    if values["original_price"] is None:
        values["original_price"] = data.price

    book = Book(**values)
    session.add(book)
    session.commit()
    session.refresh(book)

    logger.info(f"Book created: {book.id} {book.title!r}")
    return book


def update_book(session: Session, book: Book, patch: BookUpdate) -> Book:
    changes = patch.model_dump(exclude_unset=True)

    # columns that cannot hold NULL ignore an explicit null
    for required in ("title", "author", "description", "isbn", "genre", "price",
                     "stock", "language", "format", "is_bestseller",
                     "is_new_release", "is_on_sale"):
        if required in changes and changes[required] is None:
            changes.pop(required)

    if "slug" in changes:
        changes["slug"] = unique_slug(session, changes["slug"] or book.title, exclude_id=book.id)

    for field_name, value in changes.items():
        setattr(book, field_name, value)

    if changes.get("is_on_sale") is False:
        book.discount_percentage = None
        book.discount_start_date = None
        book.discount_end_date = None

    if changes.get("discount_percentage") is not None and not book.original_price:
        book.original_price = book.price

    book.updated_at = utcnow()
    session.add(book)
    session.commit()
    session.refresh(book)

    logger.info(f"Book updated: {book.id} fields={sorted(changes)}")
    return book


def delete_book(session: Session, book: Book):
    book_id = book.id

    session.execute(delete(CartItem).where(CartItem.book_id == book_id))
    session.execute(delete(Bookmark).where(Bookmark.book_id == book_id))
    session.execute(
        update(OrderItem).where(OrderItem.book_id == book_id).values(book_id=None)
    )
    session.delete(book)
    session.commit()

    logger.info(f"Book deleted: {book_id}")


def set_inventory(session: Session, book: Book, quantity: int) -> Book:
    previous = book.stock
    book.stock = quantity
    book.updated_at = utcnow()
    session.add(book)
    session.commit()
    session.refresh(book)

    logger.info(f"Inventory set for book {book.id}: {previous} -> {quantity}")
    return book


def set_discount(session: Session, book: Book, data: DiscountUpdate) -> Book:
    if data.is_on_sale and not book.original_price:
        book.original_price = book.price

    book.is_on_sale = data.is_on_sale
    book.discount_percentage = data.discount_percentage
    book.discount_start_date = data.start_date
    book.discount_end_date = data.end_date
    book.updated_at = utcnow()

    session.add(book)
    session.commit()
    session.refresh(book)
    return book


def remove_discount(session: Session, book: Book) -> Book:
    # original_price is kept for reference
    book.is_on_sale = False
    book.discount_percentage = None
    book.discount_start_date = None
    book.discount_end_date = None
    book.updated_at = utcnow()

    session.add(book)
    session.commit()
    session.refresh(book)
    return book
