"""
pytest Fixtures for Book Tracker API Tests

This file contains shared fixtures used across all test files.

For database tests, we use:
- session scope for the engine (expensive to create)
- function scope for sessions (each test runs in a transaction that is
  rolled back afterwards)

Users and books are created through the service layer, so fixtures go
through the same hashing and tag sanitization as API requests.
"""

# =============================================================================
# TEST ENVIRONMENT SETUP
# =============================================================================
# IMPORTANT: Set environment variables BEFORE importing the app
# This disables rate limiting and sets a test secret key and database
import os

os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key-for-unit-tests-at-least-32-characters-long"
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"

from collections.abc import Callable, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from booktracker.database import Base, get_db
from booktracker.main import app
from booktracker.models import Book, User
from booktracker.schemas import BookCreate
from booktracker.services.auth import register_user
from booktracker.services.books import create_book

PASSWORD = "secret123"


# =============================================================================
# DATABASE FIXTURES
# =============================================================================
@pytest.fixture(scope="session")
def engine():
    """
    Create a SQLite in-memory database engine.

    StaticPool keeps the connection alive for the entire session.
    Without it, SQLite in-memory database would disappear between connections.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(engine) -> Generator[Session, None, None]:
    """
    Create a fresh database session for each test.

    The session is wrapped in a transaction that's rolled back,
    ensuring test isolation without needing to recreate tables.
    """
    TestSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
    )

    connection = engine.connect()
    transaction = connection.begin()
    session = TestSessionLocal(bind=connection)

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """
    Create a test client with the test database.

    We override the get_db dependency to use our test session.
    """

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# =============================================================================
# USER FIXTURES
# =============================================================================
@pytest.fixture
def user_token(db_session: Session) -> tuple[User, str]:
    """Registered user and a valid session token for it."""
    profile, token = register_user(db_session, "Test Reader", "reader@example.com", PASSWORD)
    return db_session.get(User, profile["id"]), token


@pytest.fixture
def sample_user(user_token: tuple[User, str]) -> User:
    return user_token[0]


@pytest.fixture
def auth_headers(user_token: tuple[User, str]) -> dict[str, str]:
    return {"Authorization": f"Bearer {user_token[1]}"}


@pytest.fixture
def second_user_token(db_session: Session) -> tuple[User, str]:
    """A second account for ownership scenarios."""
    profile, token = register_user(db_session, "Other Reader", "other@example.com", PASSWORD)
    return db_session.get(User, profile["id"]), token


@pytest.fixture
def second_user(second_user_token: tuple[User, str]) -> User:
    return second_user_token[0]


@pytest.fixture
def second_auth_headers(second_user_token: tuple[User, str]) -> dict[str, str]:
    return {"Authorization": f"Bearer {second_user_token[1]}"}


# =============================================================================
# BOOK FIXTURES
# =============================================================================
@pytest.fixture
def make_book(db_session: Session, sample_user: User) -> Callable[..., Book]:
    """
    Factory for books owned by sample_user (or the given owner).

    Usage:
        book = make_book(title="Dune", tags=["sci-fi"], status="reading")
    """

    def _make_book(owner: User | None = None, **fields) -> Book:
        fields.setdefault("title", "Test Book")
        fields.setdefault("author", "Test Author")
        owner_id = (owner or sample_user).id
        return create_book(db_session, BookCreate(**fields), owner_id)

    return _make_book


@pytest.fixture
def sample_book(make_book: Callable[..., Book]) -> Book:
    return make_book(
        title="Dune",
        author="Frank Herbert",
        tags=["Sci-Fi", "classic"],
        status="reading",
        notes="Re-read before the film",
    )


@pytest.fixture
def library(make_book: Callable[..., Book]) -> list[Book]:
    """
    A small collection with known statuses, tags and authors.

    status: 2 want-to-read, 2 reading, 3 completed
    tags:   classic x4, sci-fi x3, fantasy x1, dystopia x1
    author: Isaac Asimov x3, George Orwell x2
    """
    specs = [
        ("Foundation", "Isaac Asimov", ["sci-fi", "classic"], "completed"),
        ("I, Robot", "Isaac Asimov", ["sci-fi"], "reading"),
        ("The Gods Themselves", "Isaac Asimov", ["Sci-Fi"], "want-to-read"),
        ("1984", "George Orwell", ["dystopia", "classic"], "completed"),
        ("Animal Farm", "George Orwell", ["classic"], "completed"),
        ("The Hobbit", "J.R.R. Tolkien", ["fantasy", "classic"], "reading"),
        ("Emma", "Jane Austen", [], "want-to-read"),
    ]
    return [
        make_book(title=title, author=author, tags=tags, status=status)
        for title, author, tags, status in specs
    ]
