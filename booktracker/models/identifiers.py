"""
Column default helpers shared by the models.

Identifiers are 12 random bytes rendered as 24 lowercase hex characters,
the format the API accepts in /books/{id} paths.
"""

import re
import secrets
from datetime import UTC, datetime

OBJECT_ID_PATTERN = re.compile(r"^[0-9a-fA-F]{24}$")


def new_object_id() -> str:
    """Generate a new 24-hex-character identifier."""
    return secrets.token_hex(12)


def is_valid_object_id(value: str) -> bool:
    """Check that a value looks like an identifier issued by new_object_id()."""
    return bool(OBJECT_ID_PATTERN.fullmatch(value))


def utcnow() -> datetime:
    # Sub-second precision on every backend; book lists order by created_at.
    return datetime.now(UTC)
