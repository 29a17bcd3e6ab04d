"""
Books Router

CRUD and statistics endpoints for the current user's collection.

Every route requires a bearer token, and every query is scoped to the
authenticated user: another user's book is reported as "Book not found".

Route order matters: the fixed paths (/dashboard/stats, /tags,
/stats/status, /bulk) are registered before /{book_id} so they are not
captured by the id parameter.
"""

from fastapi import APIRouter, Body, status

from booktracker.dependencies import BookId, BookQuery, CurrentUser, DbSession
from booktracker.schemas import (
    BookBatchResponse,
    BookCreate,
    BookListResponse,
    BookResponse,
    BookUpdate,
    DashboardStats,
    Envelope,
    ErrorEnvelope,
    NameCount,
    StatusCountsWithTotal,
    TagListResponse,
)
from booktracker.services import books as book_service

BULK_MAX_ITEMS = 100

router = APIRouter(
    prefix="/books",
    tags=["Books"],
    responses={
        400: {"model": ErrorEnvelope, "description": "Validation failed or invalid id"},
        401: {"model": ErrorEnvelope, "description": "Missing, invalid or expired token"},
        404: {"model": ErrorEnvelope, "description": "Book not found"},
    },
)


# =============================================================================
# Statistics Endpoints
# =============================================================================
@router.get(
    "/dashboard/stats",
    response_model=Envelope[DashboardStats],
    response_model_exclude_none=True,
    summary="Dashboard statistics",
    description="""
    Summary of the collection:
    - totalBooks
    - statusCounts per reading status
    - tags: top 10 by number of books
    - recentBooks: 5 most recently added
    - topAuthors: top 5 by number of books
    """,
)
def get_dashboard_stats(current_user: CurrentUser, db: DbSession) -> Envelope[DashboardStats]:
    stats = book_service.dashboard_statistics(db, current_user.id)
    return Envelope(data=DashboardStats.model_validate(stats))


@router.get(
    "/tags",
    response_model=TagListResponse,
    response_model_exclude_none=True,
    summary="List tags",
    description="Every tag in the collection with its book count, most used first.",
)
def get_user_tags(current_user: CurrentUser, db: DbSession) -> TagListResponse:
    tags = [NameCount.model_validate(tag) for tag in book_service.user_tags(db, current_user.id)]
    return TagListResponse(count=len(tags), data=tags)


@router.get(
    "/stats/status",
    response_model=Envelope[StatusCountsWithTotal],
    response_model_exclude_none=True,
    summary="Books per reading status",
)
def get_status_counts(current_user: CurrentUser, db: DbSession) -> Envelope[StatusCountsWithTotal]:
    counts = book_service.status_counts(db, current_user.id)
    return Envelope(data=StatusCountsWithTotal.model_validate(counts))


# =============================================================================
# Bulk Endpoint
# =============================================================================
@router.post(
    "/bulk",
    response_model=BookBatchResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    summary="Add several books",
    description=f"Create 1 to {BULK_MAX_ITEMS} books in one transaction.",
)
def create_books(
    current_user: CurrentUser,
    db: DbSession,
    items: list[BookCreate] = Body(..., min_length=1, max_length=BULK_MAX_ITEMS),
) -> BookBatchResponse:
    books = book_service.create_books(db, items, current_user.id)
    return BookBatchResponse(
        message="Books added successfully",
        count=len(books),
        data=[BookResponse.model_validate(book) for book in books],
    )


# =============================================================================
# Collection Endpoints
# =============================================================================
@router.get(
    "",
    response_model=BookListResponse,
    response_model_exclude_none=True,
    summary="List books",
    description="""
    Paginated list of the collection, newest first.

    **Filters** (combined with AND):
    - status: want-to-read, reading or completed
    - tag: books carrying this tag (case-insensitive)
    - search: substring of title or author (case-insensitive)

    **Pagination:** page defaults to 1, limit to 10 (max 100).
    """,
)
def list_books(
    current_user: CurrentUser,
    db: DbSession,
    query: BookQuery,
) -> BookListResponse:
    result = book_service.list_books(db, current_user.id, query.to_filters())

    return BookListResponse(
        count=len(result.items),
        total=result.total,
        page=result.page,
        limit=result.limit,
        pages=result.pages,
        data=[BookResponse.model_validate(book) for book in result.items],
    )


@router.post(
    "",
    response_model=Envelope[BookResponse],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    summary="Add a book",
    description="""
    Add a book to the collection.

    **Required:** title, author

    **Defaults:** tags [], status want-to-read, notes "".
    Tags are trimmed, lowercased and deduplicated.
    """,
)
def create_book(
    current_user: CurrentUser,
    book_data: BookCreate,
    db: DbSession,
) -> Envelope[BookResponse]:
    book = book_service.create_book(db, book_data, current_user.id)
    return Envelope(message="Book added successfully", data=BookResponse.model_validate(book))


# =============================================================================
# Single Book Endpoints
# =============================================================================
@router.get(
    "/{book_id}",
    response_model=Envelope[BookResponse],
    response_model_exclude_none=True,
    summary="Get a book",
    responses={400: {"description": "Invalid ID format"}},
)
def get_book(current_user: CurrentUser, book_id: BookId, db: DbSession) -> Envelope[BookResponse]:
    book = book_service.get_book(db, book_id, current_user.id)
    return Envelope(data=BookResponse.model_validate(book))


@router.put(
    "/{book_id}",
    response_model=Envelope[BookResponse],
    response_model_exclude_none=True,
    summary="Update a book",
    description="""
    Partial update: only fields present in the body change.

    Tags, when sent, replace the existing list.
    """,
    responses={400: {"description": "Invalid ID format or validation failed"}},
)
def update_book(
    current_user: CurrentUser,
    book_id: BookId,
    book_data: BookUpdate,
    db: DbSession,
) -> Envelope[BookResponse]:
    book = book_service.update_book(db, book_id, current_user.id, book_data)
    return Envelope(message="Book updated successfully", data=BookResponse.model_validate(book))


@router.delete(
    "/{book_id}",
    response_model=Envelope[dict],
    summary="Delete a book",
    responses={400: {"description": "Invalid ID format"}},
)
def delete_book(current_user: CurrentUser, book_id: BookId, db: DbSession) -> Envelope[dict]:
    """Permanently delete the book."""
    book_service.delete_book(db, book_id, current_user.id)
    return Envelope(message="Book deleted successfully", data={})
