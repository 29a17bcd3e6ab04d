"""
Database Configuration Module

This module sets up SQLAlchemy 2.0 for the Book Tracker API.

We use SYNCHRONOUS SQLAlchemy: every request gets its own session from a
pooled engine. The dashboard fans its independent queries out over a small
thread pool, each thread with its own session, which gives the same latency
benefit without an async driver.

Sessions
========
Each request receives one session through the get_db dependency. Services
commit their own writes and roll back on failure; get_db only guarantees
the session is closed once the response has been produced.
"""

import sqlite3
from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from booktracker.config import get_settings

settings = get_settings()


def _unicode_lower(value: Any) -> Any:
    return value.lower() if isinstance(value, str) else value


@event.listens_for(Engine, "connect")
def register_sqlite_functions(dbapi_connection: Any, connection_record: Any) -> None:
    """
    Replace SQLite's lower() with Python's str.lower on every SQLite connection.

    The built-in only folds ASCII, so case-insensitive search and tag
    filters would miss "É" vs "é". PostgreSQL's lower() already folds
    Unicode and is left alone.
    """
    if isinstance(dbapi_connection, sqlite3.Connection):
        dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)


def engine_options(database_url: str) -> dict[str, Any]:
    """
    Build create_engine() keyword arguments for a database URL.

    SQLite uses its own pool classes, which reject the sizing options,
    and needs check_same_thread=False to be shared across threads.
    """
    options: dict[str, Any] = {
        "pool_pre_ping": True,  # Verify connections are alive before using
        "echo": settings.debug,  # Log SQL in debug mode
    }
    if make_url(database_url).get_backend_name() == "sqlite":
        options["connect_args"] = {"check_same_thread": False}
    else:
        options["pool_size"] = settings.db_pool_size
        options["max_overflow"] = settings.db_max_overflow
    return options


# =============================================================================
# Database Engine
# =============================================================================
engine = create_engine(settings.database_url, **engine_options(settings.database_url))


# =============================================================================
# Session Factory
# =============================================================================
# - autocommit=False: We control when to commit
# - autoflush=False: Don't auto-flush before queries
# - expire_on_commit=False: Objects stay readable after commit so they can
#   be serialized into the response envelope

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
    bind=engine,
)


# =============================================================================
# Base Model Class
# =============================================================================
class Base(DeclarativeBase):
    """Declarative base shared by User, Book and BookTag (and read by Alembic)."""
    pass


# =============================================================================
# Dependency Injection
# =============================================================================
def get_db() -> Generator[Session, None, None]:
    """
    Yield a request-scoped session.

    Tests replace this through app.dependency_overrides to pin every
    request to one rolled-back transaction.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# =============================================================================
# Utility Functions
# =============================================================================
def create_tables() -> None:
    """Create missing tables (development startup and the seed script)."""
    Base.metadata.create_all(bind=engine)


def drop_tables() -> None:
    """Drop every table and all data in it."""
    Base.metadata.drop_all(bind=engine)
