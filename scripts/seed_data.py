#!/usr/bin/env python3
"""
Database Seed Script

Populates the database with a demo account and a sample collection for
development.

USAGE:
    # Make sure you're in the project root with venv activated
    python scripts/seed_data.py

    # Keep existing rows and only add what is missing
    python scripts/seed_data.py --keep

This script:
1. Connects to the database using app settings
2. Clears existing data (unless --keep)
3. Creates the demo user (demo@example.com / password123)
4. Adds sample books through the book service, so tags are sanitized
   exactly as they are for API requests
"""

import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from booktracker.database import SessionLocal, create_tables
from booktracker.models import Book, BookTag, User
from booktracker.schemas import BookCreate
from booktracker.services.books import create_books
from booktracker.services.security import hash_password

DEMO_NAME = "Demo Reader"
DEMO_EMAIL = "demo@example.com"
DEMO_PASSWORD = "password123"

SAMPLE_BOOKS = [
    {
        "title": "1984",
        "author": "George Orwell",
        "tags": ["Dystopia", "classic"],
        "status": "completed",
        "notes": "Still unsettling.",
    },
    {
        "title": "Animal Farm",
        "author": "George Orwell",
        "tags": ["classic", "Satire"],
        "status": "completed",
    },
    {
        "title": "Pride and Prejudice",
        "author": "Jane Austen",
        "tags": ["romance", "Classic "],
        "status": "reading",
        "notes": "Chapter 12.",
    },
    {
        "title": "Foundation",
        "author": "Isaac Asimov",
        "tags": ["sci-fi"],
        "status": "reading",
    },
    {
        "title": "I, Robot",
        "author": "Isaac Asimov",
        "tags": ["sci-fi", "short stories"],
    },
    {
        "title": "The Hobbit",
        "author": "J.R.R. Tolkien",
        "tags": ["fantasy", "Fantasy", "classic"],
    },
    {
        "title": "Murder on the Orient Express",
        "author": "Agatha Christie",
        "tags": ["mystery"],
        "status": "completed",
    },
]


def clear_data(db: Session) -> None:
    """Clear all existing data from the database."""
    print("Clearing existing data...")
    db.execute(delete(BookTag))
    db.execute(delete(Book))
    db.execute(delete(User))
    db.commit()
    print("Data cleared.")


def get_or_create_demo_user(db: Session) -> User:
    """Return the demo user, creating it on first run."""
    user = db.execute(select(User).where(User.email == DEMO_EMAIL)).scalar_one_or_none()
    if user is not None:
        print(f"Demo user already exists: {DEMO_EMAIL}")
        return user

    print("Creating demo user...")
    user = User(
        name=DEMO_NAME,
        email=DEMO_EMAIL,
        hashed_password=hash_password(DEMO_PASSWORD),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    print(f"Created demo user: {DEMO_EMAIL}")
    return user


def seed_database(clear_existing: bool = True) -> None:
    """
    Main seed function.

    Args:
        clear_existing: If True, delete all users and books first
    """
    print("=" * 60)
    print("Starting database seed...")
    print("=" * 60)

    create_tables()

    db = SessionLocal()
    try:
        if clear_existing:
            clear_data(db)

        user = get_or_create_demo_user(db)

        print("Creating books...")
        items = [BookCreate(**data) for data in SAMPLE_BOOKS]
        books = create_books(db, items, user.id)
        print(f"Created {len(books)} books.")

        print("=" * 60)
        print("Database seeding completed successfully!")
        print("=" * 60)
        print("\nLog in with:")
        print(f"  - Email: {DEMO_EMAIL}")
        print(f"  - Password: {DEMO_PASSWORD}")
        print("\nAPI documentation at http://localhost:5000/docs")

    except Exception as e:
        db.rollback()
        print(f"Error seeding database: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed_database(clear_existing="--keep" not in sys.argv)
