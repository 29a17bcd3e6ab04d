"""
Book Model

The central model of the Book Tracker API: one row per book in a user's
private collection.

Tags are stored as rows of the book_tags table instead of an array column,
so tag membership filters and tag frequency counts are plain SQL on every
backend. Book.tags exposes them as an ordered list of strings.

Sanitizing tags (trim, lowercase, dedupe) is NOT done here; the service
layer calls sanitize_tags() before assigning them.
"""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from booktracker.database import Base
from booktracker.models.identifiers import new_object_id, utcnow

if TYPE_CHECKING:
    from booktracker.models.user import User


class BookStatus(str, Enum):
    """
    Reading status of a book.

    - WANT_TO_READ: On the wishlist (default)
    - READING: Currently being read
    - COMPLETED: Finished
    """
    WANT_TO_READ = "want-to-read"
    READING = "reading"
    COMPLETED = "completed"


class BookTag(Base):
    """
    A single tag attached to a book.

    Table: book_tags

    position keeps the order in which the tags were given.
    """

    __tablename__ = "book_tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    book_id: Mapped[str] = mapped_column(
        String(24),
        ForeignKey("books.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        index=True,
        comment="Lowercase, trimmed tag"
    )

    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    book: Mapped["Book"] = relationship("Book", back_populates="tag_rows")

    def __repr__(self) -> str:
        return f"BookTag(book_id='{self.book_id}', name='{self.name}')"


class Book(Base):
    """
    Book model representing one entry of a user's collection.

    Table: books

    Fields:
    - title: Book title (required, max 200)
    - author: Author name (required, max 100)
    - status: want-to-read | reading | completed
    - notes: Free text (max 1000, defaults to "")
    - owner_id: Owning user, never changes after creation

    Indexes:
    - (owner_id, status): status filters and dashboard counts
    - (owner_id, created_at): newest-first listing
    - (owner_id, author): top authors

    Example:
        book = Book(
            title="Dune",
            author="Frank Herbert",
            tags=["sci-fi"],
            owner_id=user.id,
        )
    """

    __tablename__ = "books"
    __table_args__ = (
        Index("ix_books_owner_status", "owner_id", "status"),
        Index("ix_books_owner_created_at", "owner_id", "created_at"),
        Index("ix_books_owner_author", "owner_id", "author"),
    )

    # -------------------------------------------------------------------------
    # Primary Key
    # -------------------------------------------------------------------------
    id: Mapped[str] = mapped_column(
        String(24),
        primary_key=True,
        default=new_object_id,
    )

    # -------------------------------------------------------------------------
    # Basic Fields
    # -------------------------------------------------------------------------
    title: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        comment="Book title"
    )

    author: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        comment="Author name"
    )

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=BookStatus.WANT_TO_READ.value,
        comment="want-to-read, reading or completed"
    )

    notes: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
        comment="Personal notes (max 1000 characters)"
    )

    # -------------------------------------------------------------------------
    # Ownership
    # -------------------------------------------------------------------------
    owner_id: Mapped[str] = mapped_column(
        String(24),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # -------------------------------------------------------------------------
    # Timestamps
    # -------------------------------------------------------------------------
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )

    # -------------------------------------------------------------------------
    # Relationships
    # -------------------------------------------------------------------------
    owner: Mapped["User"] = relationship("User", back_populates="books")

    # selectin loading fetches the tags of a whole page in one extra query
    tag_rows: Mapped[list[BookTag]] = relationship(
        BookTag,
        back_populates="book",
        order_by=BookTag.position,
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )

    @property
    def tags(self) -> list[str]:
        """Tag names in the order they were given."""
        return [tag.name for tag in self.tag_rows]

    @tags.setter
    def tags(self, names: list[str]) -> None:
        self.tag_rows = [
            BookTag(name=name, position=position)
            for position, name in enumerate(names)
        ]

    def __repr__(self) -> str:
        return f"Book(id='{self.id}', title='{self.title}', status='{self.status}')"
