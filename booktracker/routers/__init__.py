"""
API Routers Package

This package contains FastAPI routers that handle API endpoints.

Router Structure:
- auth.py: /api/auth/* endpoints (signup, login, profile, logout)
- books.py: /api/books/* endpoints (CRUD, tags, statistics)

Each router is imported and registered in main.py.
"""

from booktracker.routers.auth import router as auth_router
from booktracker.routers.books import router as books_router

__all__ = [
    "auth_router",
    "books_router",
]
