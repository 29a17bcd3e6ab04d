"""
Book Pydantic Schemas

Handles:
- Create / partial update payloads with length and status validation
- Book responses with the computed statusDisplay field
- Paginated list envelope
- Dashboard statistics

Tags are accepted as given (any case, padding, duplicates); the service
layer sanitizes them before persistence.
"""

from datetime import datetime
from typing import Annotated

from pydantic import Field, StringConstraints, computed_field, field_validator

from booktracker.models.book import BookStatus
from booktracker.schemas.common import CamelModel, Envelope
from booktracker.utils.books import status_display

TITLE_MAX_LENGTH = 200
AUTHOR_MAX_LENGTH = 100
NOTES_MAX_LENGTH = 1000

TagName = Annotated[str, StringConstraints(max_length=100)]


def _required_text(v: str | None, label: str) -> str:
    if v is None:
        raise ValueError(f"{label} cannot be null")
    if not v.strip():
        raise ValueError(f"{label} cannot be empty or whitespace")
    return v.strip()


class BookCreate(CamelModel):
    """
    Schema for creating a new book.

    Example request body:
    {
        "title": "Dune",
        "author": "Frank Herbert",
        "tags": ["Sci-Fi", "classic"],
        "status": "reading",
        "notes": "Re-read before the film"
    }
    """

    title: str = Field(
        ...,
        max_length=TITLE_MAX_LENGTH,
        description="Book title",
        examples=["Dune"],
    )

    author: str = Field(
        ...,
        max_length=AUTHOR_MAX_LENGTH,
        description="Author name",
        examples=["Frank Herbert"],
    )

    tags: list[TagName] | None = Field(
        default=None,
        description="Tags (trimmed, lowercased and deduplicated on save)",
        examples=[["sci-fi", "classic"]],
    )

    status: BookStatus = Field(
        default=BookStatus.WANT_TO_READ,
        description="Reading status",
    )

    notes: str | None = Field(
        default="",
        max_length=NOTES_MAX_LENGTH,
        description="Personal notes",
    )

    @field_validator("title")
    @classmethod
    def title_must_not_be_empty(cls, v: str) -> str:
        return _required_text(v, "Title")

    @field_validator("author")
    @classmethod
    def author_must_not_be_empty(cls, v: str) -> str:
        return _required_text(v, "Author")

    @field_validator("notes")
    @classmethod
    def strip_notes(cls, v: str | None) -> str:
        return v.strip() if v else ""


class BookUpdate(CamelModel):
    """
    Schema for updating an existing book.

    All fields are optional: only the fields present in the request body
    are changed. Sending null for title, author or status is an error;
    null tags or notes clear them.
    """

    title: str | None = Field(
        default=None,
        max_length=TITLE_MAX_LENGTH,
        description="Book title",
    )

    author: str | None = Field(
        default=None,
        max_length=AUTHOR_MAX_LENGTH,
        description="Author name",
    )

    tags: list[TagName] | None = Field(
        default=None,
        description="Tags (replaces existing)",
    )

    status: BookStatus | None = Field(
        default=None,
        description="Reading status",
    )

    notes: str | None = Field(
        default=None,
        max_length=NOTES_MAX_LENGTH,
        description="Personal notes",
    )

    @field_validator("title")
    @classmethod
    def title_must_not_be_empty(cls, v: str | None) -> str:
        return _required_text(v, "Title")

    @field_validator("author")
    @classmethod
    def author_must_not_be_empty(cls, v: str | None) -> str:
        return _required_text(v, "Author")

    @field_validator("status")
    @classmethod
    def status_must_not_be_null(cls, v: BookStatus | None) -> BookStatus:
        if v is None:
            raise ValueError("Status cannot be null")
        return v

    @field_validator("notes")
    @classmethod
    def strip_notes(cls, v: str | None) -> str:
        return v.strip() if v else ""


class BookResponse(CamelModel):
    """
    Schema for book responses.

    Includes database fields (id, owner, timestamps) and statusDisplay.
    """

    id: str = Field(..., description="Unique identifier (24 hex characters)")
    title: str
    author: str
    tags: list[str] = Field(default_factory=list)
    status: str
    notes: str = ""
    owner_id: str = Field(..., description="Id of the owning user")
    created_at: datetime
    updated_at: datetime

    @computed_field(alias="statusDisplay")
    @property
    def status_display(self) -> str:
        return status_display(self.status)


class BookListResponse(Envelope[list[BookResponse]]):
    """
    Envelope for paginated book lists.

    - count: Items on this page
    - total: Items matching the filters across all pages
    - page / limit: Effective (clamped) pagination values
    - pages: ceil(total / limit)
    """

    count: int = Field(..., ge=0)
    total: int = Field(..., ge=0)
    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1, le=100)
    pages: int = Field(..., ge=0)


class BookBatchResponse(Envelope[list[BookResponse]]):
    """Envelope for bulk creation."""

    count: int = Field(..., ge=0)


# =============================================================================
# Statistics
# =============================================================================
class NameCount(CamelModel):
    """A tag or author with the number of books carrying it."""

    name: str
    count: int


class TagListResponse(Envelope[list[NameCount]]):
    count: int = Field(..., ge=0)


class StatusCounts(CamelModel):
    want_to_read: int = 0
    reading: int = 0
    completed: int = 0


class StatusCountsWithTotal(StatusCounts):
    total: int = 0


class RecentBook(CamelModel):
    """Projected fields of a recently added book."""

    id: str
    title: str
    author: str
    status: str
    created_at: datetime


class DashboardStats(CamelModel):
    """
    Dashboard summary for the current user.

    - tags: top 10 tags by count
    - recent_books: 5 most recently added
    - top_authors: top 5 authors by count
    """

    total_books: int
    status_counts: StatusCounts
    tags: list[NameCount]
    recent_books: list[RecentBook]
    top_authors: list[NameCount]
