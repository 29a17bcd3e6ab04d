"""
Test Suite for Book Tracker API

Test Organization:
- conftest.py: Shared fixtures (test database, client, users, books)
- test_auth.py: /api/auth endpoints and the auth service
- test_books.py: /api/books CRUD endpoints
- test_book_queries.py: Book service filters, writes and aggregations
- test_dashboard.py: Statistics endpoints and query fan-out
- test_errors.py: Error envelope, root and health endpoints
- test_rate_limiter.py: slowapi limiter and 429 responses
- test_security.py: Password hashing and session tokens
- test_utils.py: Pure helpers

Running Tests:
    # Run all tests
    pytest

    # Run specific file
    pytest tests/test_books.py

    # Run with verbose output
    pytest -v
"""
