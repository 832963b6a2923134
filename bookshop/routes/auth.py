import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session, select

from bookshop.database import get_session
from bookshop.models.user import User, UserRole
from bookshop.schemas.user_schemas import UserRegister, UserLogin, Token
from bookshop.utils.hash import hash_password, verify_password
from bookshop.utils.token import create_user_token

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
def register_user(payload: UserRegister, session: Session = Depends(get_session)):
    email = payload.email.lower()
    existing_user = session.exec(select(User).where(User.email == email)).first()
    if existing_user:
        raise HTTPException(400, "Email already registered")

    user = User(
        first_name=payload.first_name,
        last_name=payload.last_name,
        email=email,
        password=hash_password(payload.password),
        address=payload.address,
        city=payload.city,
        state=payload.state,
    )

    session.add(user)
    session.commit()
    session.refresh(user)

    logger.info(f"Registered user {user.id}")
    return Token(
        access_token=create_user_token(user),
        token_type="bearer",
        role=UserRole(user.role).value,
    )


@router.post("/login", response_model=Token)
def login(payload: UserLogin, session: Session = Depends(get_session)):
    user = session.exec(select(User).where(User.email == payload.email.lower())).first()

    if not user or not verify_password(payload.password, user.password):
        raise HTTPException(401, "Invalid email or password")

    if not user.can_login:
        raise HTTPException(403, "User account is disabled")

    return Token(
        access_token=create_user_token(user),
        token_type="bearer",
        role=UserRole(user.role).value,
    )
