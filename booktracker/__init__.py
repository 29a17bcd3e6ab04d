"""
Book Tracker API Application Package

A personal book-tracking REST API: users register, authenticate and manage a
private collection of books with tags, reading status and notes.

Package Structure:
- config.py: Application configuration using Pydantic Settings
- database.py: SQLAlchemy database connection and session management
- main.py: FastAPI application factory and configuration
- dependencies.py: Dependency injection functions
- exceptions.py: Error taxonomy mapped to the error envelope
- models/: SQLAlchemy ORM models
- schemas/: Pydantic request/response schemas
- routers/: API route handlers
- services/: Business logic (auth, book queries, rate limiting)
- utils/: Pure helper functions
"""

__version__ = "1.0.0"
