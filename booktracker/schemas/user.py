"""
User Pydantic Schemas

These schemas define the shape of data for account-related API operations.

Schemas:
- UserCreate: Registration data (name, email, password)
- LoginRequest: Credentials for login
- UserUpdate: Profile update fields (name, email)
- UserResponse: Public user data (never exposes the password hash)
- AuthPayload / UserPayload: `data` blocks of the auth endpoints
"""

from datetime import datetime

from email_validator import EmailNotValidError, validate_email
from pydantic import Field, field_validator

from booktracker.schemas.common import CamelModel

NAME_MAX_LENGTH = 50
EMAIL_MAX_LENGTH = 255
PASSWORD_MIN_LENGTH = 6


def _clean_name(v: str) -> str:
    if not v.strip():
        raise ValueError("Name cannot be empty")
    return v.strip()


def _check_email(v: str) -> str:
    """
    Validate the address format and return it trimmed but otherwise as sent.

    Accounts are looked up by exact match, so signup, login and profile
    updates must all see the same spelling. email-validator's normalized
    form (lowercased domain) is only used for the format check.
    """
    email = v.strip()
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        raise ValueError("Please provide a valid email") from None
    return email


class UserCreate(CamelModel):
    """
    Schema for user registration.

    Example request body:
    {
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "password": "secret123"
    }
    """

    name: str = Field(
        ...,
        max_length=NAME_MAX_LENGTH,
        description="Display name (max 50 characters)",
        examples=["Ada Lovelace"],
    )

    email: str = Field(
        ...,
        max_length=EMAIL_MAX_LENGTH,
        description="Login email, stored exactly as sent (after trimming)",
        examples=["ada@example.com"],
    )

    password: str = Field(
        ...,
        min_length=PASSWORD_MIN_LENGTH,
        max_length=128,
        description="Password (min 6 characters)",
        examples=["secret123"],
    )

    @field_validator("name")
    @classmethod
    def name_must_not_be_empty(cls, v: str) -> str:
        """Validate and normalize name."""
        return _clean_name(v)

    @field_validator("email")
    @classmethod
    def email_must_be_valid(cls, v: str) -> str:
        return _check_email(v)


class LoginRequest(CamelModel):
    """Credentials for POST /auth/login."""

    email: str = Field(..., max_length=EMAIL_MAX_LENGTH, description="Registered email address")
    password: str = Field(..., max_length=128, description="Account password")

    @field_validator("email", "password")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Field cannot be empty")
        return v

    @field_validator("email")
    @classmethod
    def strip_email(cls, v: str) -> str:
        return v.strip()


class UserUpdate(CamelModel):
    """
    Schema for updating the current user's profile.

    Omitted fields are left unchanged; explicit nulls are rejected.
    """

    name: str | None = Field(
        default=None,
        max_length=NAME_MAX_LENGTH,
        description="New display name",
    )

    email: str | None = Field(
        default=None,
        max_length=EMAIL_MAX_LENGTH,
        description="New email address",
    )

    @field_validator("name")
    @classmethod
    def name_must_not_be_empty(cls, v: str | None) -> str:
        if v is None:
            raise ValueError("Name cannot be null")
        return _clean_name(v)

    @field_validator("email")
    @classmethod
    def email_must_not_be_null(cls, v: str | None) -> str:
        if v is None:
            raise ValueError("Email cannot be null")
        return _check_email(v)


class UserResponse(CamelModel):
    """
    Schema for user responses (what the API returns).

    SECURITY: Never includes the password hash.
    """

    id: str = Field(..., description="Unique user identifier")
    name: str = Field(..., description="Display name")
    email: str = Field(..., description="User's email address")
    created_at: datetime = Field(..., description="When the user registered")


class AuthPayload(CamelModel):
    """Returned by signup and login."""

    user: UserResponse
    token: str = Field(..., description="Bearer session token")


class UserPayload(CamelModel):
    """Returned by GET/PUT /auth/me."""

    user: UserResponse
