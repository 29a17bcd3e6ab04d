"""
Authentication Service

Registration, login, session token verification and profile management.

Security Features:
=================
1. Passwords are hashed with bcrypt before storage and never logged
2. Login failures use one generic message for unknown email and wrong
   password, and spend the same hashing time on both paths
3. Tokens are re-checked against the users table on every verification,
   so a token outlives neither its expiry nor its user
"""

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from booktracker.exceptions import Conflict, NotFound, Unauthorized
from booktracker.models import User
from booktracker.services.security import (
    create_access_token,
    decode_token,
    dummy_verify,
    hash_password,
    verify_password,
)

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"
TOKEN_INVALID = "Not authorized. Token invalid or expired."
TOKEN_USER_MISSING = "User not found. Token invalid."


def public_profile(user: User) -> dict[str, Any]:
    """Public projection of a user; the password hash is never included."""
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "created_at": user.created_at,
    }


def _find_by_email(db: Session, email: str) -> User | None:
    stmt = select(User).where(User.email == email)
    return db.execute(stmt).scalar_one_or_none()


def register_user(
    db: Session,
    name: str,
    email: str,
    password: str,
) -> tuple[dict[str, Any], str]:
    """
    Create a new account and issue its first session token.

    Args:
        db: Database session
        name: Display name
        email: Login email (must not be registered yet)
        password: Plain password, hashed before persistence

    Returns:
        Tuple of (public profile, session token)

    Raises:
        Conflict: If the email is already registered
    """
    if _find_by_email(db, email) is not None:
        raise Conflict("User already exists with this email")

    user = User(
        name=name,
        email=email,
        hashed_password=hash_password(password),
    )

    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info(f"New user registered: {user.email}")

    return public_profile(user), create_access_token(user.id)


def login_user(db: Session, email: str, password: str) -> tuple[dict[str, Any], str]:
    """
    Authenticate with email and password.

    Returns:
        Tuple of (public profile, session token)

    Raises:
        Unauthorized: Same message for unknown email and wrong password
    """
    user = _find_by_email(db, email)

    if user is None:
        dummy_verify()
        logger.warning(f"Login failed: user not found for {email}")
        raise Unauthorized(INVALID_CREDENTIALS)

    if not verify_password(password, user.hashed_password):
        logger.warning(f"Login failed: incorrect password for {email}")
        raise Unauthorized(INVALID_CREDENTIALS)

    logger.info(f"User logged in: {user.email}")

    return public_profile(user), create_access_token(user.id)


def verify_token(db: Session, token: str) -> str:
    """
    Resolve a session token to the id of an existing user.

    Raises:
        Unauthorized: Bad signature, expired, malformed, or user gone
    """
    payload = decode_token(token)
    if payload is None:
        raise Unauthorized(TOKEN_INVALID)

    user_id = payload.get("sub")
    if not isinstance(user_id, str) or not user_id:
        raise Unauthorized(TOKEN_INVALID)

    if db.get(User, user_id) is None:
        logger.warning(f"Token presented for missing user {user_id}")
        raise Unauthorized(TOKEN_USER_MISSING)

    return user_id


def get_user(db: Session, user_id: str) -> User:
    """
    Load a user by id.

    Raises:
        NotFound: If the user does not exist
    """
    user = db.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


def get_public_profile(db: Session, user_id: str) -> dict[str, Any]:
    """Public profile of a user, without the password hash."""
    return public_profile(get_user(db, user_id))


def update_profile(
    db: Session,
    user_id: str,
    name: str | None = None,
    email: str | None = None,
) -> dict[str, Any]:
    """
    Change a user's name and/or email.

    Fields left as None are not touched.

    Raises:
        NotFound: If the user does not exist
        Conflict: If the new email belongs to another user
    """
    user = get_user(db, user_id)

    if email is not None and email != user.email:
        existing = _find_by_email(db, email)
        if existing is not None and existing.id != user.id:
            raise Conflict("Email already in use")
        user.email = email

    if name is not None:
        user.name = name

    db.commit()
    db.refresh(user)

    logger.info(f"Profile updated for user {user.id}")

    return public_profile(user)
