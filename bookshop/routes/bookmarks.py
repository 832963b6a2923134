import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from bookshop.database import get_session
from bookshop.models.book import Book
from bookshop.models.bookmark import Bookmark
from bookshop.models.user import User
from bookshop.schemas.bookmark_schemas import BookmarkCreate, BookmarkRead
from bookshop.services.pricing import effective_unit_price, is_sale_active
from bookshop.utils.clock import utcnow
from bookshop.utils.token import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[BookmarkRead])
def get_bookmarks(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    now = utcnow()
    rows = session.exec(
        select(Bookmark, Book)
        .join(Book, Bookmark.book_id == Book.id)
        .where(Bookmark.user_id == current_user.id)
        .order_by(Bookmark.created_at.desc(), Bookmark.id.desc())
    ).all()

    return [
        BookmarkRead(
            id=bookmark.id,
            book_id=book.id,
            title=book.title,
            author=book.author,
            image_url=book.image_url,
            price=float(book.price),
            effective_price=float(effective_unit_price(book, now)),
            is_on_sale=is_sale_active(book, now),
            discount_percentage=(
                float(book.discount_percentage)
                if book.discount_percentage is not None else None
            ),
            added_on=bookmark.created_at,
        )
        for bookmark, book in rows
    ]


@router.post("")
def add_bookmark(
    data: BookmarkCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    if not session.get(Book, data.book_id):
        raise HTTPException(404, "Book not found")

    existing = session.exec(
        select(Bookmark)
        .where(Bookmark.user_id == current_user.id, Bookmark.book_id == data.book_id)
    ).first()

    if existing:
        return {"message": "Book already bookmarked", "bookmark_id": existing.id}

    bookmark = Bookmark(user_id=current_user.id, book_id=data.book_id)
    session.add(bookmark)
    try:
        session.commit()
    except IntegrityError:
        # a concurrent request inserted the same pair first
        session.rollback()
        raise HTTPException(409, "Book already bookmarked")
    session.refresh(bookmark)

    return {"message": "Book bookmarked", "bookmark_id": bookmark.id}


@router.delete("/{book_id}")
def remove_bookmark(
    book_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    bookmark = session.exec(
        select(Bookmark)
        .where(Bookmark.user_id == current_user.id, Bookmark.book_id == book_id)
    ).first()

    if bookmark:
        session.delete(bookmark)
        session.commit()

    return {"message": "Bookmark removed"}
