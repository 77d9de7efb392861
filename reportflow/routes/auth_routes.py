"""
Authentication Routes Module
============================

Endpoints for the cookie-based session flow.

Features:
- Login sets the signed session cookie
- Registration attaches the default role
- Logout revokes every session of the user
- All attempts are audit logged

Security:
- PBKDF2 password verification
- Account lockout after repeated failures
- httpOnly, SameSite=lax cookie; secure in production
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from reportflow.core.config import settings
from reportflow.core.dependencies.auth import get_current_user, get_current_user_optional
from reportflow.core.logging import get_logger
from reportflow.db.session import get_db
from reportflow.models.user import User
from reportflow.schemas import (
    ErrorResponse,
    LoginRequest,
    LoginResponse,
    LogoutResponse,
    RegisterRequest,
    UserResponse,
    ValidationErrorResponse,
)
from reportflow.services.audit_service import get_client_ip
from reportflow.services.auth_service import AuthService

# Initialize logger
logger = get_logger(__name__)


# =====================================
# Router Setup
# =====================================

router = APIRouter(
    prefix="/api/auth",
    tags=["Authentication"],
    responses={
        400: {"model": ValidationErrorResponse, "description": "Validation error"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
)


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.SESSION_MAX_AGE_SECONDS,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )


# =====================================
# Login Endpoint
# =====================================

@router.post(
    "/login",
    response_model=LoginResponse,
    summary="User Login",
    description="""
    Authenticate user with email and password.

    Sets the session cookie on success.

    Security features:
    - Account locks after MAX_LOGIN_ATTEMPTS failed attempts
    - Rate limited per IP
    - All attempts are audit logged
    """,
    responses={
        200: {"description": "Successfully authenticated"},
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
        403: {"model": ErrorResponse, "description": "Account locked or disabled"},
        429: {"model": ErrorResponse, "description": "Too many requests"},
    },
)
def login(
    request: Request,
    response: Response,
    login_data: LoginRequest,
    db: Session = Depends(get_db),
) -> User:
    """
    Authenticate user and start a session.

    Raises:
        InvalidCredentialsError: 401 on unknown email or wrong password
        AccountLockedError / AccountDisabledError: 403
    """
    auth_service = AuthService(db)
    client_ip = get_client_ip(request)

    user = auth_service.authenticate_user(
        email=login_data.email,
        password=login_data.password,
        ip_address=client_ip,
    )
    set_session_cookie(response, auth_service.create_session_token(user))

    logger.info(
        "User logged in successfully",
        extra={
            "user_id": str(user.id),
            "ip_address": client_ip,
        }
    )
    return user


# =====================================
# Registration Endpoint
# =====================================

@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    description="Create a new account. The password is stored as a salted PBKDF2 hash.",
    responses={
        201: {"description": "Account created"},
        400: {"model": ErrorResponse, "description": "Email already registered or invalid input"},
    },
)
def register(
    request: Request,
    register_data: RegisterRequest,
    db: Session = Depends(get_db),
) -> User:
    return AuthService(db).register(
        email=register_data.email,
        password=register_data.password,
        name=register_data.name,
        ip_address=get_client_ip(request),
    )


# =====================================
# Logout Endpoint
# =====================================

@router.post(
    "/logout",
    response_model=LogoutResponse,
    summary="User Logout",
    description="""
    Clear the session cookie.

    When the session is still valid, the user's token version is
    incremented so every outstanding session cookie stops working.
    """,
    responses={
        200: {"description": "Successfully logged out"},
    },
)
def logout(
    request: Request,
    response: Response,
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db),
) -> dict:
    if current_user is not None:
        AuthService(db).logout(current_user, ip_address=get_client_ip(request))
        logger.info(
            "User logged out",
            extra={"user_id": str(current_user.id)}
        )

    clear_session_cookie(response)
    return {"success": True}


# =====================================
# Get Current User Endpoint
# =====================================

@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get Current User",
    description="Get the currently authenticated user's information.",
    responses={
        200: {"description": "Current user info"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
def get_me(
    current_user: User = Depends(get_current_user),
) -> User:
    return current_user
