"""
Book Tracker application

create_app() assembles the service: the auth and books routers under /api,
the root and /health endpoints, slowapi rate limiting on every route, CORS
and (in development) a per-request log line.

Every failure leaves the service as {"success": false, "message": ...},
optionally with "errors" for field problems. Outside production the
traceback is added under "stack".

Run locally with:
    uvicorn booktracker.main:app --reload --port 5000
"""

import logging
import re
import time
import traceback
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy import text
from sqlalchemy.exc import DataError, IntegrityError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from booktracker import __version__
from booktracker.config import get_settings
from booktracker.database import create_tables, engine
from booktracker.dependencies import DbSession
from booktracker.exceptions import APIError, FieldError, ValidationFailed
from booktracker.routers import auth_router, books_router
from booktracker.services.rate_limiter import limiter, rate_limit_exceeded_handler

# =============================================================================
# Logging Configuration
# =============================================================================
settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# "UNIQUE constraint failed: users.email" (SQLite)
# "Key (email)=(ada@example.com) already exists." (PostgreSQL)
_SQLITE_UNIQUE = re.compile(r"UNIQUE constraint failed: \w+\.(\w+)")
_POSTGRES_UNIQUE = re.compile(r"Key \((\w+)\)=")


# =============================================================================
# Error Envelope Helpers
# =============================================================================
def error_response(
    status_code: int,
    body: dict[str, Any],
    exc: Exception | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """
    Build an error envelope response.

    Outside production the formatted traceback of exc is added as "stack".
    """
    if exc is not None and not settings.is_production:
        body["stack"] = "".join(traceback.format_exception(exc))
    return JSONResponse(status_code=status_code, content=body, headers=headers)


def field_errors_from_pydantic(errors: list[dict[str, Any]]) -> list[FieldError]:
    """
    Convert pydantic error dicts to field errors.

    The field name is the location without its "body"/"query"/"path" prefix,
    joined with dots (bulk items read "0.title"). A missing field reads
    "<Field> is required".
    """
    field_errors = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ())]
        if len(loc) > 1 and loc[0] in {"body", "query", "path", "header"}:
            loc = loc[1:]
        field = ".".join(loc) or "body"

        if error.get("type") == "missing":
            message = f"{loc[-1].capitalize() if loc else 'Body'} is required"
        else:
            message = str(error.get("msg", "Invalid value"))
            message = message.removeprefix("Value error, ")

        field_errors.append(FieldError(field, message))
    return field_errors


def duplicate_field_message(exc: IntegrityError) -> str:
    """Message for a uniqueness violation, naming the field when possible."""
    detail = str(exc.orig)
    for pattern in (_SQLITE_UNIQUE, _POSTGRES_UNIQUE):
        match = pattern.search(detail)
        if match:
            return f"{match.group(1)} already exists"
    return "Duplicate field value"


# =============================================================================
# Lifespan Events
# =============================================================================
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Log the configuration on startup and release pooled connections on shutdown."""
    # ----- STARTUP -----
    logger.info(f"Starting {settings.app_name}...")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"API version: {settings.api_version}")

    if settings.is_development:
        # Migrations own the schema elsewhere
        create_tables()
        logger.info("Database tables ensured")

    yield  # Application runs here

    # ----- SHUTDOWN -----
    logger.info(f"Shutting down {settings.app_name}...")
    engine.dispose()


# =============================================================================
# Application Factory
# =============================================================================
def create_app() -> FastAPI:
    """Build the app with its middleware, error handlers and routers."""
    app = FastAPI(
        title=settings.app_name,
        description="""
## Book Tracker API

Track the books you want to read, are reading and have finished.

### Features
- **Auth**: Sign up, log in, manage your profile
- **Books**: CRUD with tags, reading status and notes
- **Search**: Filter by status and tag, search title and author
- **Dashboard**: Counts per status, top tags, top authors, recent books

### Authentication
Send `Authorization: Bearer <token>` with the token from signup or login.

### Rate Limiting
100 requests per 15 minutes per client by default.
        """,
        version=settings.api_version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # -------------------------------------------------------------------------
    # Rate Limiting
    # -------------------------------------------------------------------------
    # Attach the limiter to the app state so SlowAPIMiddleware can find it
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # -------------------------------------------------------------------------
    # CORS Middleware
    # -------------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -------------------------------------------------------------------------
    # Request Logging
    # -------------------------------------------------------------------------
    if settings.is_development:

        @app.middleware("http")
        async def log_requests(request: Request, call_next):
            start = time.perf_counter()
            response = await call_next(request)
            duration_ms = (time.perf_counter() - start) * 1000
            logger.info(
                f"{request.method} {request.url.path} {response.status_code} "
                f"- {duration_ms:.0f}ms"
            )
            return response

    # -------------------------------------------------------------------------
    # Exception Handlers
    # -------------------------------------------------------------------------
    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
        """Domain errors raised by services and dependencies."""
        if exc.status_code >= 500:
            logger.error(f"{exc.kind}: {exc.message}", exc_info=exc)
        return error_response(exc.status_code, exc.to_dict(), exc, exc.headers)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Body, query and path validation failures."""
        error = ValidationFailed(errors=field_errors_from_pydantic(exc.errors()))
        return error_response(error.status_code, error.to_dict())

    @app.exception_handler(ValidationError)
    async def pydantic_validation_handler(
        request: Request,
        exc: ValidationError,
    ) -> JSONResponse:
        """Pydantic validation raised inside a service."""
        error = ValidationFailed(errors=field_errors_from_pydantic(exc.errors()))
        return error_response(error.status_code, error.to_dict(), exc)

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
        logger.warning(f"Integrity error: {exc.orig}")
        body = {"success": False, "message": duplicate_field_message(exc)}
        return error_response(status.HTTP_400_BAD_REQUEST, body, exc)

    @app.exception_handler(DataError)
    async def data_error_handler(request: Request, exc: DataError) -> JSONResponse:
        logger.warning(f"Data error: {exc.orig}")
        body = {"success": False, "message": "Invalid data format"}
        return error_response(status.HTTP_400_BAD_REQUEST, body, exc)

    @app.exception_handler(SQLAlchemyError)
    async def sqlalchemy_exception_handler(
        request: Request,
        exc: SQLAlchemyError,
    ) -> JSONResponse:
        """Any other database failure; the driver message stays in the log."""
        logger.error(f"Database error: {exc}", exc_info=exc)
        body = {"success": False, "message": "A database error occurred"}
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, body, exc)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request,
        exc: StarletteHTTPException,
    ) -> JSONResponse:
        """Framework errors: unmatched routes (404) and wrong methods (405)."""
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            path = request.url.path
            if request.url.query:
                path = f"{path}?{request.url.query}"
            message = f"Route not found - {path}"
        else:
            message = str(exc.detail)

        body = {"success": False, "message": message}
        return error_response(exc.status_code, body, headers=getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Last resort: a generic 500 whose details only reach the log."""
        logger.error(f"Unhandled error: {exc}", exc_info=exc)
        body = {"success": False, "message": "Internal server error"}
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, body, exc)

    # -------------------------------------------------------------------------
    # Register Routers
    # -------------------------------------------------------------------------
    api_prefix = "/api"

    app.include_router(auth_router, prefix=api_prefix)
    app.include_router(books_router, prefix=api_prefix)

    # -------------------------------------------------------------------------
    # Health Check Endpoints
    # -------------------------------------------------------------------------
    @app.get(
        "/",
        tags=["Root"],
        summary="API root",
        description="Welcome message and API information.",
    )
    def root() -> dict:
        """Service banner with links to the docs and health check."""
        return {
            "success": True,
            "message": f"{settings.app_name} is running",
            "version": settings.api_version,
            "environment": settings.environment,
            "docs": "/docs",
            "health": "/health",
        }

    @app.get(
        "/health",
        tags=["Health"],
        summary="Health check",
        description="Check that the API is running and the database answers.",
    )
    def health_check(db: DbSession) -> JSONResponse:
        """
        Health check endpoint.

        Used by load balancers and container orchestrators. Answers 503
        when the database cannot be reached.
        """
        try:
            db.execute(text("SELECT 1"))
            database = "connected"
        except SQLAlchemyError as exc:
            logger.error(f"Health check failed: {exc}")
            database = "unavailable"

        healthy = database == "connected"
        return JSONResponse(
            status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "healthy" if healthy else "unhealthy",
                "database": database,
                "version": __version__,
            },
        )

    return app


# =============================================================================
# Application Instance
# =============================================================================
# This is what uvicorn imports: uvicorn booktracker.main:app

app = create_app()


# =============================================================================
# Development Server
# =============================================================================
# This allows running the app directly with: python -m booktracker.main

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "booktracker.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
