"""
Security Service

Credentials live here: passwords are stored as bcrypt hashes via passlib,
and sessions are HS256 JWTs via python-jose whose "sub" claim is the user
id. Tokens carry an expiry and are never refreshed.

Usage:
    from booktracker.services.security import hash_password, verify_password

    hashed = hash_password("secret123")
    is_valid = verify_password("secret123", hashed)
"""

import logging
from datetime import UTC, datetime, timedelta

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from booktracker.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

# Hashes from retired schemes are reported as needing an update
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

TOKEN_TYPE = "access"


def hash_password(password: str) -> str:
    """
    Return a salted bcrypt hash for storage in users.hashed_password.

    Example:
        >>> hashed = hash_password("secret123")
        >>> hashed.startswith("$2b$")
        True
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a login password against the stored hash."""
    return pwd_context.verify(plain_password, hashed_password)


def dummy_verify() -> None:
    """
    Spend the time of one password verification without a stored hash.

    Called when a login names an unknown email so the response time does
    not reveal whether the account exists.
    """
    pwd_context.dummy_verify()


# -------------------------------------------------------------------------
# Session Tokens
# -------------------------------------------------------------------------
def create_access_token(
    subject: str,
    expires_delta: timedelta | None = None,
) -> str:
    """
    Create a signed session token bound to a user id.

    Args:
        subject: The user id stored in the "sub" claim
        expires_delta: Optional custom lifetime (defaults to JWT_EXPIRE_DAYS)

    Returns:
        Encoded JWT token string

    Example:
        >>> token = create_access_token("65f1c0ffee0000000000abcd")
        >>> token.count(".") == 2  # header.payload.signature
        True
    """
    now = datetime.now(UTC)
    if expires_delta is None:
        expires_delta = timedelta(days=settings.jwt_expire_days)

    to_encode = {
        "sub": subject,
        "iat": now,
        "exp": now + expires_delta,
        "type": TOKEN_TYPE,
    }

    return jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )


def decode_token(token: str) -> dict | None:
    """
    Decode and validate a session token.

    Expiry is evaluated here, at verification time; tokens are never
    renewed.

    Returns:
        Decoded payload if valid, None if invalid, expired or of the wrong type
    """
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except ExpiredSignatureError:
        logger.warning("Session token expired")
        return None
    except JWTError as e:
        logger.warning(f"Rejected session token: {e}")
        return None

    if payload.get("type") != TOKEN_TYPE:
        logger.warning(f"Token type mismatch: expected {TOKEN_TYPE}")
        return None

    return payload
