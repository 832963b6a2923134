from fastapi import APIRouter, Depends
from sqlmodel import Session

from bookshop.database import get_session
from bookshop.models.user import User
from bookshop.schemas.cart_schemas import CartAddRequest, CartSummary, CartUpdateRequest
from bookshop.services import cart_service
from bookshop.utils.token import get_current_user

router = APIRouter()


# View Cart

@router.get("", response_model=CartSummary)
def get_cart(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    return cart_service.get_cart(session, current_user)


@router.get("/count")
def cart_count(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    return {"count": cart_service.cart_count(session, current_user)}


# Add to Cart

@router.post("/add")
def add_to_cart(
    data: CartAddRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    item = cart_service.add_item(session, current_user, data.book_id, data.quantity)
    return {
        "message": "Added to cart",
        "item_id": item.id,
        "book_id": item.book_id,
        "quantity": item.quantity,
    }


# Update Cart

@router.put("/update/{item_id}")
def update_cart_item(
    item_id: int,
    data: CartUpdateRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    item = cart_service.update_item(session, current_user, item_id, data.quantity)
    if item is None:
        return {"message": "Item removed"}

    return {"message": "Quantity updated", "item_id": item.id, "quantity": item.quantity}


# Remove Cart

@router.delete("/remove/{item_id}")
def remove_item(
    item_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    cart_service.remove_item(session, current_user, item_id)
    return {"message": "Item removed from cart"}


# Clear Cart

@router.delete("/clear")
def clear_cart(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    cart_service.clear_cart(session, current_user.id)
    return {"message": "Cart cleared"}
