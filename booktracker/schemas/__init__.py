"""
Pydantic Schemas Package

This package contains Pydantic models for request/response validation.

WHY Separate Schemas from SQLAlchemy Models?
============================================
1. Security: Control exactly what data is exposed in API responses
2. Validation: Different rules for create vs update vs response
3. Decoupling: Database schema can evolve independently of API
4. Documentation: Schemas generate OpenAPI documentation

Schema Naming Convention:
- XxxCreate: Fields required when creating a new record
- XxxUpdate: Fields allowed when updating (all optional)
- XxxResponse: Fields returned in API responses
"""

from booktracker.schemas.common import CamelModel, Envelope, ErrorDetail, ErrorEnvelope
from booktracker.schemas.book import (
    BookBatchResponse,
    BookCreate,
    BookListResponse,
    BookResponse,
    BookUpdate,
    DashboardStats,
    NameCount,
    RecentBook,
    StatusCounts,
    StatusCountsWithTotal,
    TagListResponse,
)
from booktracker.schemas.user import (
    AuthPayload,
    LoginRequest,
    UserCreate,
    UserPayload,
    UserResponse,
    UserUpdate,
)

__all__ = [
    # Envelope schemas
    "CamelModel",
    "Envelope",
    "ErrorDetail",
    "ErrorEnvelope",
    # Book schemas
    "BookCreate",
    "BookUpdate",
    "BookResponse",
    "BookListResponse",
    "BookBatchResponse",
    # Statistics schemas
    "DashboardStats",
    "NameCount",
    "RecentBook",
    "StatusCounts",
    "StatusCountsWithTotal",
    "TagListResponse",
    # User schemas
    "UserCreate",
    "UserUpdate",
    "UserResponse",
    "LoginRequest",
    "AuthPayload",
    "UserPayload",
]
