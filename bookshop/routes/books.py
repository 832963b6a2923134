from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from bookshop.database import get_session
from bookshop.dependencies.admin import require_admin
from bookshop.models.user import User
from bookshop.schemas.book_schemas import (
    BookCreate,
    BookDetail,
    BookListResponse,
    BookUpdate,
    DiscountUpdate,
    InventoryUpdate,
)
from bookshop.services import catalog_service
from bookshop.services.catalog_service import BookFilter, SortKey
from bookshop.utils.pagination import DEFAULT_PAGE_SIZE
from bookshop.utils.token import get_optional_user

router = APIRouter()


# ---------- PUBLIC CATALOG ----------

@router.get("", response_model=BookListResponse, summary="Browse, filter and sort the catalog")
def list_books(
    search: Optional[str] = None,
    author: Optional[List[str]] = Query(None),
    genre: Optional[List[str]] = Query(None),
    language: Optional[List[str]] = Query(None),
    publisher: Optional[List[str]] = Query(None),
    format: Optional[List[str]] = Query(None),
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    in_stock: bool = False,
    on_sale: bool = False,
    new_release: bool = False,
    new_arrival: bool = False,
    coming_soon: bool = False,
    award_winner: bool = False,
    bestseller: bool = False,
    min_rating: Optional[float] = Query(None, ge=0, le=5),
    sort_by: SortKey = SortKey.title,
    desc: bool = False,
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
    session: Session = Depends(get_session),
    current_user: Optional[User] = Depends(get_optional_user),
):
    filters = BookFilter(
        search=search,
        authors=author or [],
        genres=genre or [],
        languages=language or [],
        publishers=publisher or [],
        formats=format or [],
        min_price=min_price,
        max_price=max_price,
        in_stock=in_stock,
        on_sale=on_sale,
        new_release=new_release,
        new_arrival=new_arrival,
        coming_soon=coming_soon,
        award_winner=award_winner,
        bestseller=bestseller,
        min_rating=min_rating,
        sort_by=sort_by,
        desc=desc,
        page=page,
        page_size=page_size,
    )
    return catalog_service.list_books(session, filters, viewer=current_user)


@router.get("/genres", response_model=List[str])
def list_genres(session: Session = Depends(get_session)):
    return catalog_service.list_genres(session)


@router.get("/slug/{slug}", response_model=BookDetail)
def get_book_by_slug(
    slug: str,
    session: Session = Depends(get_session),
    current_user: Optional[User] = Depends(get_optional_user),
):
    book = catalog_service.get_book_by_slug(session, slug)
    return catalog_service.build_book_detail(session, book, viewer=current_user)


@router.get("/{book_id}", response_model=BookDetail)
def get_book(
    book_id: int,
    session: Session = Depends(get_session),
    current_user: Optional[User] = Depends(get_optional_user),
):
    book = catalog_service.get_book_or_404(session, book_id)
    return catalog_service.build_book_detail(session, book, viewer=current_user)


# ---------- ADMIN ----------

@router.post("", response_model=BookDetail, status_code=status.HTTP_201_CREATED)
def create_book(
    data: BookCreate,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    book = catalog_service.create_book(session, data)
    return catalog_service.build_book_detail(session, book)


@router.put("/{book_id}", response_model=BookDetail)
def update_book(
    book_id: int,
    data: BookUpdate,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    book = catalog_service.get_book_or_404(session, book_id)
    book = catalog_service.update_book(session, book, data)
    return catalog_service.build_book_detail(session, book)


@router.delete("/{book_id}")
def delete_book(
    book_id: int,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    book = catalog_service.get_book_or_404(session, book_id)
    catalog_service.delete_book(session, book)
    return {"message": "Book deleted successfully", "book_id": book_id}


@router.patch("/{book_id}/inventory")
def update_inventory(
    book_id: int,
    data: InventoryUpdate,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    book = catalog_service.get_book_or_404(session, book_id)
    book = catalog_service.set_inventory(session, book, data.quantity)
    return {
        "message": "Inventory updated",
        "book_id": book.id,
        "stock": book.stock,
        "in_stock": book.in_stock,
    }


@router.post("/{book_id}/discount", response_model=BookDetail)
def apply_discount(
    book_id: int,
    data: DiscountUpdate,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    book = catalog_service.get_book_or_404(session, book_id)
    book = catalog_service.set_discount(session, book, data)
    return catalog_service.build_book_detail(session, book)


@router.delete("/{book_id}/discount", response_model=BookDetail)
def remove_discount(
    book_id: int,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    book = catalog_service.get_book_or_404(session, book_id)
    book = catalog_service.remove_discount(session, book)
    return catalog_service.build_book_detail(session, book)
