import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from bookshop.database import get_session
from bookshop.models.book import Book
from bookshop.models.review import Review
from bookshop.models.user import User, UserRole
from bookshop.schemas.review_schemas import BookReviews, ReviewCreate, ReviewRead, ReviewUpdate
from bookshop.services.order_service import has_purchased
from bookshop.utils.clock import utcnow
from bookshop.utils.token import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()


def _review_read(review: Review, user: User) -> ReviewRead:
    return ReviewRead(
        id=review.id,
        book_id=review.book_id,
        user_id=review.user_id,
        user_name=f"{user.first_name} {user.last_name}".strip() if user else "",
        rating=review.rating,
        comment=review.comment,
        created_at=review.created_at,
        updated_at=review.updated_at,
    )


# ---------------------------------------------------------
# LIST REVIEWS FOR A BOOK
# ---------------------------------------------------------

@router.get("/book/{book_id}", response_model=BookReviews)
def list_reviews(
    book_id: int,
    session: Session = Depends(get_session)
):
    if not session.get(Book, book_id):
        raise HTTPException(404, "Book not found")

    rows = session.exec(
        select(Review, User)
        .join(User, Review.user_id == User.id)
        .where(Review.book_id == book_id)
        .order_by(Review.created_at.desc(), Review.id.desc())
    ).all()

    ratings = [review.rating for review, _ in rows]
    avg_rating = round(sum(ratings) / len(ratings), 2) if ratings else 0.0

    return BookReviews(
        book_id=book_id,
        average_rating=avg_rating,
        total_reviews=len(ratings),
        reviews=[_review_read(review, user) for review, user in rows],
    )


# ---------------------------------------------------------
# CREATE A REVIEW
# ---------------------------------------------------------

@router.post("", response_model=ReviewRead, status_code=status.HTTP_201_CREATED)
def create_review(
    data: ReviewCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    if not session.get(Book, data.book_id):
        raise HTTPException(404, "Book not found")

    if not has_purchased(session, current_user.id, data.book_id):
        raise HTTPException(403, "You can only review books you have purchased")

    existing = session.exec(
        select(Review).where(
            Review.user_id == current_user.id,
            Review.book_id == data.book_id,
        )
    ).first()
    if existing:
        raise HTTPException(409, "You have already reviewed this book")

    review = Review(
        book_id=data.book_id,
        user_id=current_user.id,
        rating=data.rating,
        comment=data.comment,
    )
    session.add(review)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise HTTPException(409, "You have already reviewed this book")
    session.refresh(review)

    logger.info(f"Review {review.id} added for book {review.book_id} by user {current_user.id}")
    return _review_read(review, current_user)


# ---------------------------------------------------------
# UPDATE A REVIEW
# ---------------------------------------------------------

@router.put("/{review_id}", response_model=ReviewRead)
def update_review(
    review_id: int,
    data: ReviewUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    review = session.get(Review, review_id)

    if not review:
        raise HTTPException(404, "Review not found")

    if review.user_id != current_user.id:
        raise HTTPException(403, "You can only edit your own review")

    if data.rating is not None:
        review.rating = data.rating

    if data.comment is not None:
        review.comment = data.comment

    review.updated_at = utcnow()

    session.add(review)
    session.commit()
    session.refresh(review)

    return _review_read(review, current_user)


# ---------------------------------------------------------
# DELETE REVIEW
# ---------------------------------------------------------

@router.delete("/{review_id}")
def delete_review(
    review_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    review = session.get(Review, review_id)

    if not review:
        raise HTTPException(404, "Review not found")

    if review.user_id != current_user.id and current_user.role != UserRole.admin:
        raise HTTPException(403, "You can only delete your own review")

    session.delete(review)
    session.commit()

    return {"message": "Review deleted successfully"}
