from fastapi import APIRouter, Depends

from bookshop.models.user import User, UserRole
from bookshop.schemas.user_schemas import UserProfile
from bookshop.utils.token import get_current_user

router = APIRouter()


@router.get("/me", response_model=UserProfile)
def get_my_profile(current_user: User = Depends(get_current_user)):
    return UserProfile(
        id=current_user.id,
        first_name=current_user.first_name,
        last_name=current_user.last_name,
        email=current_user.email,
        role=UserRole(current_user.role).value,
        address=current_user.address,
        city=current_user.city,
        state=current_user.state,
        member_since=current_user.member_since,
        successful_order_count=current_user.successful_order_count,
        has_loyalty_discount=current_user.has_loyalty_discount,
    )
