"""
Authentication Router

Handles account endpoints:
- Registration (name/email/password -> user + token)
- Login (email/password -> user + token)
- Current user profile (read and update)
- Logout

Security:
=========
- Passwords are hashed with bcrypt before storage
- Plain text passwords are never logged or stored
- Tokens are stateless JWTs; logout is acknowledged and the client
  discards its token
"""

import logging

from fastapi import APIRouter, status

from booktracker.dependencies import CurrentUser, DbSession
from booktracker.schemas import (
    AuthPayload,
    Envelope,
    ErrorEnvelope,
    LoginRequest,
    UserCreate,
    UserPayload,
    UserResponse,
    UserUpdate,
)
from booktracker.services import auth as auth_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
    responses={
        400: {
            "model": ErrorEnvelope,
            "description": "Validation failed or email already registered",
        },
        401: {"model": ErrorEnvelope, "description": "Unauthorized"},
    },
)


# -------------------------------------------------------------------------
# Registration Endpoint
# -------------------------------------------------------------------------
@router.post(
    "/signup",
    response_model=Envelope[AuthPayload],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    description="""
    Create a new account and receive a session token.

    **Requirements:**
    - name: 1-50 characters
    - email: valid address, not already registered
    - password: at least 6 characters
    """,
)
def signup(user_data: UserCreate, db: DbSession) -> Envelope[AuthPayload]:
    profile, token = auth_service.register_user(
        db,
        name=user_data.name,
        email=user_data.email,
        password=user_data.password,
    )

    return Envelope(
        message="User registered successfully",
        data=AuthPayload(user=UserResponse.model_validate(profile), token=token),
    )


# -------------------------------------------------------------------------
# Login Endpoint
# -------------------------------------------------------------------------
@router.post(
    "/login",
    response_model=Envelope[AuthPayload],
    response_model_exclude_none=True,
    summary="Login with email and password",
    description="""
    Authenticate and receive a session token.

    Use it in later requests as `Authorization: Bearer <token>`.
    Unknown email and wrong password both answer 401 "Invalid credentials".
    """,
)
def login(credentials: LoginRequest, db: DbSession) -> Envelope[AuthPayload]:
    profile, token = auth_service.login_user(
        db,
        email=credentials.email,
        password=credentials.password,
    )

    return Envelope(
        message="Login successful",
        data=AuthPayload(user=UserResponse.model_validate(profile), token=token),
    )


# -------------------------------------------------------------------------
# Current User Endpoints
# -------------------------------------------------------------------------
@router.get(
    "/me",
    response_model=Envelope[UserPayload],
    response_model_exclude_none=True,
    summary="Get current user",
)
def get_me(current_user: CurrentUser, db: DbSession) -> Envelope[UserPayload]:
    """Return the profile of the authenticated user."""
    profile = auth_service.get_public_profile(db, current_user.id)
    return Envelope(data=UserPayload(user=UserResponse.model_validate(profile)))


@router.put(
    "/me",
    response_model=Envelope[UserPayload],
    response_model_exclude_none=True,
    summary="Update current user",
    description="Change name and/or email. Omitted fields are left unchanged.",
)
def update_me(
    current_user: CurrentUser,
    user_data: UserUpdate,
    db: DbSession,
) -> Envelope[UserPayload]:
    changes = user_data.model_dump(exclude_unset=True)
    profile = auth_service.update_profile(
        db,
        current_user.id,
        name=changes.get("name"),
        email=changes.get("email"),
    )

    return Envelope(
        message="Profile updated successfully",
        data=UserPayload(user=UserResponse.model_validate(profile)),
    )


# -------------------------------------------------------------------------
# Logout Endpoint
# -------------------------------------------------------------------------
@router.post(
    "/logout",
    response_model=Envelope[None],
    response_model_exclude_none=True,
    summary="Logout",
)
def logout(current_user: CurrentUser) -> Envelope[None]:
    """Acknowledge logout; the token stays valid until it expires."""
    logger.info(f"User logged out: {current_user.email}")
    return Envelope(message="Logged out successfully")
