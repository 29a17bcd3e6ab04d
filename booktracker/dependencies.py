"""
FastAPI Dependencies Module

Dependencies are reusable components injected into route handlers.
FastAPI's Depends() function manages their lifecycle.

Provided here:
- DbSession: per-request database session
- CurrentUser: the user behind the bearer token (401 otherwise)
- BookId: a path id that is 24 hex characters (400 otherwise)
- BookQuery: filter and pagination query parameters for book listings
"""

import logging
from typing import Annotated

from fastapi import Depends, Path, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from booktracker.database import get_db
from booktracker.exceptions import FieldError, Unauthorized, ValidationFailed
from booktracker.models import BookStatus, User
from booktracker.models.identifiers import is_valid_object_id
from booktracker.services.auth import get_user, verify_token
from booktracker.services.books import BookFilters

logger = logging.getLogger(__name__)

# =============================================================================
# Type Aliases with Annotated
# =============================================================================
# Instead of writing:
#   def get_books(db: Session = Depends(get_db)):
#
# You can write:
#   def get_books(db: DbSession):

DbSession = Annotated[Session, Depends(get_db)]


# =============================================================================
# Bearer Token Authentication
# =============================================================================
# auto_error=False: a missing header is reported through our own
# Unauthorized error so it gets the standard envelope.
bearer_scheme = HTTPBearer(auto_error=False)

MISSING_TOKEN = "Not authorized to access this route. Please log in."


def get_current_user(
    db: DbSession,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> User:
    """
    Resolve the bearer token to the current user.

    This dependency:
    1. Extracts the token from "Authorization: Bearer <token>"
    2. Verifies signature and expiry
    3. Checks that the user still exists

    Raises:
        Unauthorized: Missing, invalid or expired token, or deleted user
    """
    if credentials is None or not credentials.credentials:
        raise Unauthorized(MISSING_TOKEN, headers={"WWW-Authenticate": "Bearer"})

    user_id = verify_token(db, credentials.credentials)
    return get_user(db, user_id)


CurrentUser = Annotated[User, Depends(get_current_user)]


# =============================================================================
# Path Parameters
# =============================================================================
def get_book_id(
    book_id: str = Path(..., description="Book id (24 hex characters)"),
) -> str:
    """
    Validate the {book_id} path segment.

    Raises:
        ValidationFailed: "Invalid ID format" unless it is 24 hex characters
    """
    if not is_valid_object_id(book_id):
        raise ValidationFailed("Invalid ID format")
    return book_id


BookId = Annotated[str, Depends(get_book_id)]


# =============================================================================
# Book Listing Parameters
# =============================================================================
class BookQueryParams:
    """
    Filter and pagination parameters for GET /books.

    Usage:
        GET /api/books?status=reading&tag=sci-fi&search=dune&page=2&limit=20

    An unknown status is rejected here with 400. page and limit must be
    integers but are not range-checked: the service clamps them
    (page >= 1, 1 <= limit <= 100).
    """

    def __init__(
        self,
        status: str | None = Query(
            default=None,
            description="want-to-read, reading or completed",
            examples=["reading"],
        ),
        tag: str | None = Query(
            default=None,
            max_length=100,
            description="Only books carrying this tag (case-insensitive)",
            examples=["sci-fi"],
        ),
        search: str | None = Query(
            default=None,
            max_length=200,
            description="Case-insensitive match on title or author",
            examples=["herbert"],
        ),
        page: int | None = Query(
            default=None,
            description="Page number (1-indexed)",
            examples=[1, 2],
        ),
        limit: int | None = Query(
            default=None,
            description="Items per page (clamped to 1-100)",
            examples=[10, 25],
        ),
    ) -> None:
        if status == "":
            status = None
        if status is not None and status not in {s.value for s in BookStatus}:
            valid = ", ".join(s.value for s in BookStatus)
            raise ValidationFailed(
                errors=[FieldError("status", f"Status must be one of: {valid}")]
            )

        self.status = status
        self.tag = tag
        self.search = search or None
        self.page = page
        self.limit = limit

    def to_filters(self) -> BookFilters:
        return BookFilters(
            status=self.status,
            tag=self.tag,
            search=self.search,
            page=self.page,
            limit=self.limit,
        )


BookQuery = Annotated[BookQueryParams, Depends()]
