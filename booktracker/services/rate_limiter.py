"""
Rate Limiting Service

Every route is limited per client through SlowAPIMiddleware and the
limiter's default_limits (100 requests per 15 minutes unless configured).

Counting uses slowapi's fixed-window strategy: a client gets N requests
per window and the counter resets when the window ends. Counters live in
memory by default; point RATE_LIMIT_STORAGE_URI at redis:// to share them
across processes.
"""

import logging

from fastapi import Request
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from booktracker.config import get_settings
from booktracker.exceptions import RateLimited

logger = logging.getLogger(__name__)
settings = get_settings()


def get_client_ip(request: Request) -> str:
    """
    Identify the client behind any reverse proxy.

    The first hop of X-Forwarded-For wins, then X-Real-IP, then the
    socket peer address.
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        client, _, _ = forwarded_for.partition(",")
        return client.strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    return get_remote_address(request)


def create_limiter(
    enabled: bool | None = None,
    default_limit: str | None = None,
    storage_uri: str | None = None,
) -> Limiter:
    """
    Build a fixed-window limiter keyed by client IP.

    Arguments default to the application settings; passing them explicitly
    gives an independent limiter (used by tests and alternative deployments).
    """
    enabled = settings.rate_limit_enabled if enabled is None else enabled
    default_limit = default_limit or settings.rate_limit_default
    storage_uri = storage_uri or settings.rate_limit_storage_uri

    limiter = Limiter(
        key_func=get_client_ip,
        default_limits=[default_limit],
        storage_uri=storage_uri,
        strategy="fixed-window",
        enabled=enabled,
    )

    logger.info(
        f"Rate limiter initialized - enabled: {enabled}, "
        f"default: {default_limit}, storage: {storage_uri.split(':', 1)[0]}"
    )

    return limiter


# Shared by the application; configured from settings
limiter = create_limiter()


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """
    Answer a limited request with the 429 error envelope.

    Retry-After carries the window length in seconds.
    """
    error = RateLimited()
    response = JSONResponse(status_code=error.status_code, content=error.to_dict())

    limit_detail = str(exc.detail)
    response.headers["Retry-After"] = str(exc.limit.limit.get_expiry())
    response.headers["X-RateLimit-Limit"] = limit_detail

    logger.warning(
        f"Rate limit exceeded for {get_client_ip(request)}: {limit_detail}"
    )

    return response
