"""
Services Package

This package contains business logic services that are:
- Separate from HTTP handling (routers)
- Reusable across different parts of the application
- Easier to test in isolation

Current services:
- auth.py: Registration, login, token verification and profile updates
- books.py: Owner-scoped book queries, writes and dashboard aggregation
- rate_limiter.py: Rate limiting with slowapi (memory or Redis storage)
- security.py: Password hashing and JWT utilities
"""
