"""
SQLAlchemy Models Package

This package contains all database models for the Book Tracker API.

Model Relationships:
- User -> Book: One-to-Many (a user owns many books, a book has one owner)
- Book -> BookTag: One-to-Many (ordered tag rows)

Import all models here to:
1. Make them available as: from booktracker.models import Book, User
2. Ensure Alembic discovers them for migrations
"""

from booktracker.models.user import User
from booktracker.models.book import Book, BookStatus, BookTag

__all__ = [
    "User",
    "Book",
    "BookStatus",
    "BookTag",
]
