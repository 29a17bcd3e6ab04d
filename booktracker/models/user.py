"""
User Model

Represents a registered account. Users own books; the password is kept
only as a bcrypt hash and is never serialized. Deleting a user deletes
their books.
"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from booktracker.database import Base
from booktracker.models.identifiers import new_object_id, utcnow

if TYPE_CHECKING:
    from booktracker.models.book import Book


class User(Base):
    """
    An account, keyed by a 24-hex-character id.

    Emails are stored as sent and matched exactly; ix_users_email keeps them unique.
    """

    __tablename__ = "users"

    # -------------------------------------------------------------------------
    # Primary Key
    # -------------------------------------------------------------------------
    id: Mapped[str] = mapped_column(
        String(24),
        primary_key=True,
        default=new_object_id,
    )

    # -------------------------------------------------------------------------
    # Profile & Authentication Fields
    # -------------------------------------------------------------------------
    name: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="User's display name"
    )

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
        comment="Login email, matched exactly"
    )

    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Bcrypt hashed password"
    )

    # -------------------------------------------------------------------------
    # Timestamps
    # -------------------------------------------------------------------------
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
        comment="Signup time (UTC)"
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
        comment="Last profile change (UTC)"
    )

    # -------------------------------------------------------------------------
    # Relationships
    # -------------------------------------------------------------------------
    books: Mapped[list["Book"]] = relationship(
        "Book",
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"User(id='{self.id}', email='{self.email}')"
