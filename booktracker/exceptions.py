"""
API Error Taxonomy

Domain services raise one of the variants below instead of building HTTP
responses themselves. The central handlers in main.py turn any APIError into
the uniform envelope:

    {"success": false, "message": "...", "errors": [...]}

Each variant carries a fixed kind and status code; call sites only supply
the message and, for validation failures, field-level context.
"""

from dataclasses import dataclass
from typing import Any, ClassVar


@dataclass(frozen=True)
class FieldError:
    """A single field-level validation message."""

    field: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message}


class APIError(Exception):
    """Base class for every error the API reports to clients."""

    kind: ClassVar[str] = "server_error"
    status_code: ClassVar[int] = 500
    default_message: ClassVar[str] = "Internal server error"

    def __init__(
        self,
        message: str | None = None,
        errors: list[FieldError] | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.message = message or self.default_message
        self.errors = list(errors or [])
        self.headers = headers
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Envelope body for this error (without debug details)."""
        body: dict[str, Any] = {"success": False, "message": self.message}
        if self.errors:
            body["errors"] = [error.to_dict() for error in self.errors]
        return body

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind!r}, message={self.message!r})"


class ValidationFailed(APIError):
    """Input failed validation (400)."""

    kind = "validation"
    status_code = 400
    default_message = "Validation failed"


class Unauthorized(APIError):
    """Missing, invalid or expired token, or bad credentials (401)."""

    kind = "unauthorized"
    status_code = 401
    default_message = "Not authorized to access this route"


class NotFound(APIError):
    """Resource missing or not owned by the caller (404)."""

    kind = "not_found"
    status_code = 404
    default_message = "Resource not found"


class Conflict(APIError):
    """Uniqueness violation such as a duplicate email (400)."""

    kind = "conflict"
    status_code = 400
    default_message = "Resource already exists"


class RateLimited(APIError):
    kind = "rate_limited"
    status_code = 429
    default_message = "Too many requests, please try again later"


class ServerError(APIError):
    """Unexpected failure (500)."""
