"""Shared test configuration and fixtures."""

import os
from datetime import timedelta
from decimal import Decimal

# Set test environment before importing the app
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENV"] = "test"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing"
os.environ["BREVO_API_KEY"] = ""
os.environ["ADMIN_EMAILS"] = ""

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session, SQLModel  # noqa: E402

from bookshop import models  # noqa: E402,F401
from bookshop.database import engine, get_session  # noqa: E402
from bookshop.main import app  # noqa: E402
from bookshop.models.book import Book  # noqa: E402
from bookshop.models.user import User, UserRole  # noqa: E402
from bookshop.utils.clock import utcnow  # noqa: E402
from bookshop.utils.hash import hash_password  # noqa: E402
from bookshop.utils.token import create_user_token  # noqa: E402

PASSWORD = "SecurePass123"


@pytest.fixture(autouse=True)
def database():
    SQLModel.metadata.create_all(engine)
    yield
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session():
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(session):
    """Test client whose requests share the fixture session."""
    def override_get_session():
        yield session

    app.dependency_overrides[get_session] = override_get_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session):
    counter = {"n": 0}

    def factory(role=UserRole.member, successful_order_count=0, can_login=True, email=None):
        counter["n"] += 1
        user = User(
            first_name=f"{role.value.title()}",
            last_name=f"User{counter['n']}",
            email=email or f"{role.value}{counter['n']}@example.com",
            password=hash_password(PASSWORD),
            role=role,
            can_login=can_login,
            successful_order_count=successful_order_count,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return factory


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_user_token(user)}"}


@pytest.fixture
def member(make_user):
    return make_user()


@pytest.fixture
def member_headers(member):
    return auth_headers(member)


@pytest.fixture
def admin(make_user):
    return make_user(role=UserRole.admin)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def staff(make_user):
    return make_user(role=UserRole.staff)


@pytest.fixture
def staff_headers(staff):
    return auth_headers(staff)


@pytest.fixture
def make_book(session):
    counter = {"n": 0}

    def factory(**overrides):
        counter["n"] += 1
        n = counter["n"]
        values = {
            "title": f"Book {n:03d}",
            "slug": f"book-{n:03d}",
            "author": "Jane Author",
            "description": "A fine book.",
            "isbn": f"978000000{n:04d}",
            "genre": "Fiction",
            "price": Decimal("20.00"),
            "original_price": Decimal("20.00"),
            "stock": 10,
        }
        values.update(overrides)
        book = Book(**values)
        session.add(book)
        session.commit()
        session.refresh(book)
        return book

    return factory


@pytest.fixture
def sale_window():
    """A discount window that is open right now."""
    now = utcnow()
    return now - timedelta(days=1), now + timedelta(days=1)


@pytest.fixture
def place_order(client):
    """Place an order through the API."""
    def submit(headers, lines, **shipping):
        payload = {
            "items": [{"book_id": book_id, "quantity": qty} for book_id, qty in lines],
            "shipping_address": "1 Main St",
            "shipping_city": "Springfield",
            "shipping_state": "IL",
            "shipping_zip_code": "62701",
        }
        payload.update(shipping)
        return client.post("/api/orders", json=payload, headers=headers)

    return submit
