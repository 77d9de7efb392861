"""
Authentication Dependencies Module
==================================

FastAPI dependencies for session authentication and user extraction.

Features:
- Session cookie validation
- User extraction from the signed session token
- Account status verification
- Request context for logging and auditing

Usage:
    @router.get("/protected")
    def protected_route(user: User = Depends(get_current_user)):
        return {"user": user.email}
"""

from typing import Optional

from fastapi import Depends, HTTPException, status, Request
from fastapi.security import APIKeyCookie
from sqlalchemy.orm import Session

from reportflow.core.config import settings
from reportflow.core.exceptions import (
    AccountDisabledError,
    AccountLockedError,
    AuthenticationError,
)
from reportflow.core.logging import get_logger, security_logger, user_id_context
from reportflow.db.session import get_db
from reportflow.models.user import User
from reportflow.services.audit_service import get_client_ip
from reportflow.services.auth_service import AuthService

# Initialize logger
logger = get_logger(__name__)


# =====================================
# Session Cookie Scheme
# =====================================

session_cookie = APIKeyCookie(
    name=settings.SESSION_COOKIE_NAME,
    auto_error=False,
    description="Signed session token set by /api/auth/login",
)


def _not_authenticated() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
    )


# =====================================
# Get Current User
# =====================================

def get_current_user(
    request: Request,
    token: Optional[str] = Depends(session_cookie),
    db: Session = Depends(get_db),
) -> User:
    """
    Validate the session cookie and return the current user.

    Security checks performed:
    - Token signature, issuer and audience
    - Token expiration
    - Token version (revoked on logout)
    - Account status (locked/disabled)

    Raises:
        HTTPException: 401 if the session is missing or invalid,
            403 if the account is locked or disabled
    """
    if not token:
        raise _not_authenticated()

    try:
        user = AuthService(db).validate_session_token(token)
    except (AccountLockedError, AccountDisabledError) as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except AuthenticationError as e:
        security_logger.log_session_invalid(
            reason=e.details.get("reason", e.message),
            ip_address=get_client_ip(request),
        )
        raise _not_authenticated()

    # Set request context for logging
    request.state.user_id = str(user.id)
    user_id_context.set(str(user.id))
    return user


# =====================================
# Get Current User (Optional)
# =====================================

def get_current_user_optional(
    request: Request,
    token: Optional[str] = Depends(session_cookie),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """
    Get current user if the session is valid, otherwise return None.

    Used by endpoints that behave differently for signed-in users
    but don't require authentication.
    """
    if not token:
        return None

    try:
        user = AuthService(db).validate_session_token(token)
    except AuthenticationError:
        return None
    except (AccountLockedError, AccountDisabledError):
        return None

    request.state.user_id = str(user.id)
    return user
