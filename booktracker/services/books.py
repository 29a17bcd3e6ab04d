"""
Book Query & Aggregation Service

All reads and writes of a user's collection go through this module. Every
statement is owner-scoped: a book that belongs to someone else behaves
exactly like a book that does not exist.

Features:
- Filter composition (status, tag, search) combined with AND
- Pagination clamping and newest-first ordering
- Single and bulk creation with tag sanitization
- Partial updates (only fields present in the payload change)
- Dashboard statistics computed by independent queries run concurrently
"""

import logging
import math
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import ColumnElement, Engine, desc, func, or_, select
from sqlalchemy.orm import Session, sessionmaker

from booktracker.config import get_settings
from booktracker.exceptions import NotFound
from booktracker.models import Book, BookStatus, BookTag
from booktracker.models.identifiers import utcnow
from booktracker.schemas.book import BookCreate, BookUpdate
from booktracker.utils.books import (
    escape_like,
    normalize_pagination,
    normalize_tag,
    sanitize_tags,
)

logger = logging.getLogger(__name__)
settings = get_settings()

VALID_STATUSES = frozenset(status.value for status in BookStatus)

DASHBOARD_TAG_LIMIT = 10
DASHBOARD_RECENT_LIMIT = 5
DASHBOARD_AUTHOR_LIMIT = 5

BOOK_NOT_FOUND = "Book not found"


@dataclass
class BookFilters:
    """
    Filter and pagination input for list_books().

    Values are taken as received; list_books() ignores an unknown status and
    clamps page/limit.
    """

    status: str | None = None
    tag: str | None = None
    search: str | None = None
    page: int | None = None
    limit: int | None = None


@dataclass
class BookPage:
    """One page of books plus pagination metadata."""

    items: list[Book] = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 10

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit)


# =============================================================================
# Query Building
# =============================================================================
def build_book_conditions(
    owner_id: str,
    status: str | None = None,
    tag: str | None = None,
    search: str | None = None,
) -> list[ColumnElement[bool]]:
    """
    Build the WHERE conditions of a book listing.

    - owner_id: always applied
    - status: applied only when it is a known status value
    - tag: case-insensitive, trimmed membership test against the tag set
    - search: case-insensitive substring of title OR author

    Returns:
        Conditions to pass to Select.where(); they combine with AND
    """
    conditions: list[ColumnElement[bool]] = [Book.owner_id == owner_id]

    if status in VALID_STATUSES:
        conditions.append(Book.status == status)

    tag_name = normalize_tag(tag)
    if tag_name:
        tagged_book_ids = select(BookTag.book_id).where(
            func.lower(BookTag.name) == tag_name
        )
        conditions.append(Book.id.in_(tagged_book_ids))

    if search:
        search_term = f"%{escape_like(search.lower())}%"
        conditions.append(
            or_(
                func.lower(Book.title).like(search_term, escape="\\"),
                func.lower(Book.author).like(search_term, escape="\\"),
            )
        )

    return conditions


def _owned_book_stmt(book_id: str, owner_id: str):
    return select(Book).where(Book.id == book_id, Book.owner_id == owner_id)


# =============================================================================
# Reads
# =============================================================================
def list_books(db: Session, owner_id: str, filters: BookFilters | None = None) -> BookPage:
    """
    List the owner's books, newest first, with filters and pagination.

    Args:
        db: Database session
        owner_id: Id of the requesting user
        filters: Optional status/tag/search/page/limit

    Returns:
        BookPage with the items of the requested page and the total count
        of matching books
    """
    filters = filters or BookFilters()
    page, limit = normalize_pagination(filters.page, filters.limit)
    conditions = build_book_conditions(
        owner_id,
        status=filters.status,
        tag=filters.tag,
        search=filters.search,
    )

    count_stmt = select(func.count()).select_from(Book).where(*conditions)
    total = db.execute(count_stmt).scalar() or 0

    offset = (page - 1) * limit
    if offset >= total:
        # Past the last page; page numbers are unbounded and may not fit
        # the database's integer type, so they never reach OFFSET
        return BookPage(items=[], total=total, page=page, limit=limit)

    stmt = (
        select(Book)
        .where(*conditions)
        .order_by(Book.created_at.desc(), Book.id.desc())
        .offset(offset)
        .limit(limit)
    )
    books = list(db.execute(stmt).scalars().all())

    return BookPage(items=books, total=total, page=page, limit=limit)


def get_book(db: Session, book_id: str, owner_id: str) -> Book:
    """
    Get one of the owner's books.

    Raises:
        NotFound: If the book does not exist or belongs to another user
    """
    book = db.execute(_owned_book_stmt(book_id, owner_id)).scalar_one_or_none()

    if book is None:
        raise NotFound(BOOK_NOT_FOUND)

    return book


# =============================================================================
# Writes
# =============================================================================
def _new_book(data: BookCreate, owner_id: str) -> Book:
    return Book(
        title=data.title,
        author=data.author,
        tags=sanitize_tags(data.tags),
        status=BookStatus(data.status).value,
        notes=data.notes or "",
        owner_id=owner_id,
    )


def create_book(db: Session, data: BookCreate, owner_id: str) -> Book:
    """
    Create a book owned by owner_id.

    Defaults: tags [], status want-to-read, notes "". Tags are sanitized
    before persistence.
    """
    book = _new_book(data, owner_id)

    db.add(book)
    db.commit()
    db.refresh(book)

    logger.info(f"Book {book.id} created for user {owner_id}")

    return book


def create_books(db: Session, items: list[BookCreate], owner_id: str) -> list[Book]:
    """
    Create several books in one transaction.

    Each item gets the same defaults and tag sanitization as create_book().
    """
    books = [_new_book(data, owner_id) for data in items]

    db.add_all(books)
    db.commit()
    for book in books:
        db.refresh(book)

    logger.info(f"{len(books)} books created for user {owner_id}")

    return books


def update_book(db: Session, book_id: str, owner_id: str, data: BookUpdate) -> Book:
    """
    Apply a partial update to one of the owner's books.

    Only fields explicitly present in the payload change; tags are
    re-sanitized when present.

    Raises:
        NotFound: Same rule as get_book()
    """
    book = get_book(db, book_id, owner_id)

    # model_dump(exclude_unset=True) returns only fields that were sent
    update_data = data.model_dump(exclude_unset=True)

    if "tags" in update_data:
        book.tags = sanitize_tags(update_data.pop("tags"))

    if "status" in update_data:
        update_data["status"] = BookStatus(update_data["status"]).value

    for field_name, value in update_data.items():
        setattr(book, field_name, value)

    book.updated_at = utcnow()

    db.commit()
    db.refresh(book)

    logger.info(f"Book {book.id} updated for user {owner_id}")

    return book


def delete_book(db: Session, book_id: str, owner_id: str) -> None:
    """
    Permanently delete one of the owner's books.

    Raises:
        NotFound: Same rule as get_book()
    """
    book = get_book(db, book_id, owner_id)
    db.delete(book)
    db.commit()

    logger.info(f"Book {book_id} deleted for user {owner_id}")


# =============================================================================
# Aggregations
# =============================================================================
def count_books(db: Session, owner_id: str) -> int:
    stmt = select(func.count()).select_from(Book).where(Book.owner_id == owner_id)
    return db.execute(stmt).scalar() or 0


def count_by_status(db: Session, owner_id: str) -> dict[str, int]:
    """
    Number of the owner's books per status.

    Returns:
        {"want_to_read": n, "reading": n, "completed": n}
    """
    stmt = (
        select(Book.status, func.count())
        .where(Book.owner_id == owner_id)
        .group_by(Book.status)
    )
    counts = {status: count for status, count in db.execute(stmt).all()}

    return {
        "want_to_read": counts.get(BookStatus.WANT_TO_READ.value, 0),
        "reading": counts.get(BookStatus.READING.value, 0),
        "completed": counts.get(BookStatus.COMPLETED.value, 0),
    }


def tag_frequencies(db: Session, owner_id: str, limit: int | None = None) -> list[dict[str, Any]]:
    """
    Tags of the owner's books with the number of books carrying each.

    Sorted by count descending, then name. limit=None returns every tag.
    """
    count = func.count().label("count")
    stmt = (
        select(BookTag.name, count)
        .join(Book, Book.id == BookTag.book_id)
        .where(Book.owner_id == owner_id)
        .group_by(BookTag.name)
        .order_by(desc(count), BookTag.name)
    )
    if limit is not None:
        stmt = stmt.limit(limit)

    return [{"name": name, "count": total} for name, total in db.execute(stmt).all()]


def top_authors(db: Session, owner_id: str, limit: int = DASHBOARD_AUTHOR_LIMIT) -> list[dict[str, Any]]:
    """Authors with the most books in the owner's collection."""
    count = func.count().label("count")
    stmt = (
        select(Book.author, count)
        .where(Book.owner_id == owner_id)
        .group_by(Book.author)
        .order_by(desc(count), Book.author)
        .limit(limit)
    )
    return [{"name": name, "count": total} for name, total in db.execute(stmt).all()]


def recent_books(db: Session, owner_id: str, limit: int = DASHBOARD_RECENT_LIMIT) -> list[dict[str, Any]]:
    """Projected fields of the most recently added books."""
    stmt = (
        select(Book.id, Book.title, Book.author, Book.status, Book.created_at)
        .where(Book.owner_id == owner_id)
        .order_by(Book.created_at.desc(), Book.id.desc())
        .limit(limit)
    )
    return [dict(row._mapping) for row in db.execute(stmt).all()]


def status_counts(db: Session, owner_id: str) -> dict[str, int]:
    """Per-status counts plus their sum."""
    counts = count_by_status(db, owner_id)
    return {**counts, "total": sum(counts.values())}


def user_tags(db: Session, owner_id: str) -> list[dict[str, Any]]:
    """Full tag frequency table of the owner's books, most used first."""
    return tag_frequencies(db, owner_id)


def run_queries(db: Session, queries: dict[str, Callable[[Session], Any]]) -> dict[str, Any]:
    """
    Run independent read queries and collect their results by name.

    When the session is bound to an Engine the queries fan out over a thread
    pool, each on its own session from the same engine. A session pinned to
    a single Connection cannot be shared between threads, so the queries run
    one after another on it instead.

    Exceptions raised by a query propagate to the caller.
    """
    bind = db.get_bind()
    workers = min(settings.dashboard_workers, len(queries))

    if not isinstance(bind, Engine) or workers <= 1:
        logger.debug(f"Running {len(queries)} queries sequentially")
        return {name: query(db) for name, query in queries.items()}

    factory = sessionmaker(bind=bind, autoflush=False, expire_on_commit=False)

    def run(query: Callable[[Session], Any]) -> Any:
        with factory() as session:
            return query(session)

    logger.debug(f"Running {len(queries)} queries on {workers} threads")
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = {name: executor.submit(run, query) for name, query in queries.items()}
        return {name: future.result() for name, future in futures.items()}


def dashboard_statistics(db: Session, owner_id: str) -> dict[str, Any]:
    """
    Summary of the owner's collection for the dashboard.

    The five queries below do not depend on each other and run concurrently
    (see run_queries). The result is a best-effort summary, not a snapshot:
    a write landing between two of them can make the numbers disagree.

    Returns:
        {
            "total_books": int,
            "status_counts": {"want_to_read", "reading", "completed"},
            "tags": top 10 [{"name", "count"}],
            "recent_books": 5 most recent (id, title, author, status, created_at),
            "top_authors": top 5 [{"name", "count"}],
        }
    """
    return run_queries(
        db,
        {
            "total_books": lambda s: count_books(s, owner_id),
            "status_counts": lambda s: count_by_status(s, owner_id),
            "tags": lambda s: tag_frequencies(s, owner_id, DASHBOARD_TAG_LIMIT),
            "recent_books": lambda s: recent_books(s, owner_id, DASHBOARD_RECENT_LIMIT),
            "top_authors": lambda s: top_authors(s, owner_id, DASHBOARD_AUTHOR_LIMIT),
        },
    )
