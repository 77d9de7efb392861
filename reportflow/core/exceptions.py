"""
Centralized Exception Handling Module
=====================================

Defines custom exception classes for the application.

Every exception carries an HTTP status code so the global handlers in
``reportflow.main`` can render a consistent ``{"error": ...}`` body.

Usage:
    raise NotFoundError("Organization", str(org_id))
    raise ResourceExistsError("Role", "name", payload.name)
"""

from typing import Any, Dict, Optional
from fastapi import status


class ReportFlowException(Exception):
    """
    Base exception class for the ReportFlow application.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


# ==========================
# Authentication Exceptions
# ==========================

class AuthenticationError(ReportFlowException):
    """Raised when authentication fails."""

    def __init__(
        self,
        message: str = "Not authenticated",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
            details=details,
        )


class InvalidCredentialsError(AuthenticationError):
    """Raised when login credentials are invalid."""

    def __init__(self):
        super().__init__(message="Invalid email or password")


class SessionExpiredError(AuthenticationError):
    """Raised when the session token has expired."""

    def __init__(self):
        super().__init__(message="Session has expired. Please log in again.")


class SessionInvalidError(AuthenticationError):
    """Raised when the session token is malformed, forged or revoked."""

    def __init__(self, reason: str = "Invalid session"):
        super().__init__(
            message="Not authenticated",
            details={"reason": reason},
        )


# ==========================
# Authorization Exceptions
# ==========================

class AuthorizationError(ReportFlowException):
    """Raised when user lacks required permissions."""

    def __init__(
        self,
        message: str = "Insufficient permissions",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            details=details,
        )


class PermissionDeniedError(AuthorizationError):
    """Raised when the user's role does not grant a resource action."""

    def __init__(self, resource: str, action: str):
        super().__init__(
            message=f"Missing permission '{resource}:{action}'",
            details={"resource": resource, "action": action},
        )


# ==========================
# Account Status Exceptions
# ==========================

class AccountLockedError(AuthorizationError):
    """Raised when account is locked due to failed attempts."""

    def __init__(self):
        super().__init__(
            message="Account is locked due to multiple failed login attempts. "
                    "Please contact your administrator."
        )


class AccountDisabledError(AuthorizationError):
    """Raised when account is disabled."""

    def __init__(self):
        super().__init__(
            message="Account has been disabled. Please contact your administrator."
        )


# ==========================
# Request Exceptions
# ==========================

class BadRequestError(ReportFlowException):
    """Raised when a request is well-formed but cannot be applied."""

    def __init__(
        self,
        message: str = "Bad request",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details,
        )


class EmailAlreadyExistsError(BadRequestError):
    """Raised when attempting to register with existing email."""

    def __init__(self):
        super().__init__(message="User with this email already exists")


# ==========================
# Resource Exceptions
# ==========================

class NotFoundError(ReportFlowException):
    """Raised when a resource is not found."""

    def __init__(self, resource: str = "Resource", identifier: Optional[str] = None):
        if identifier is not None:
            message = f"{resource} with ID '{identifier}' not found"
        else:
            message = f"{resource} not found"
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
        )


class ConflictError(ReportFlowException):
    """Raised when a write would violate a uniqueness constraint."""

    def __init__(
        self,
        message: str = "Resource already exists",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_409_CONFLICT,
            details=details,
        )


class ResourceExistsError(ConflictError):
    """Raised when a resource with the same unique field already exists."""

    def __init__(self, resource: str, field: str, value: str):
        super().__init__(message=f"{resource} with {field} '{value}' already exists")


# ==========================
# Rate Limiting Exceptions
# ==========================

class RateLimitError(ReportFlowException):
    """Raised when rate limit is exceeded."""

    def __init__(
        self,
        message: str = "Too many requests. Please try again later.",
        retry_after: int = 60,
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            details={"retry_after_seconds": retry_after}
        )


# ==========================
# Infrastructure Exceptions
# ==========================

class UnsupportedProviderError(ReportFlowException):
    """Raised when the configured database provider is unknown."""

    def __init__(self, provider: str):
        super().__init__(message=f"Unsupported database provider type: {provider}")


# ==========================
# Helper Functions
# ==========================

def error_body(exc: ReportFlowException) -> Dict[str, Any]:
    """
    Render an exception as a JSON error body.

    Args:
        exc: ReportFlowException instance

    Returns:
        ``{"error": message}`` plus ``details`` when there are any
    """
    body: Dict[str, Any] = {"error": exc.message}
    if exc.details:
        body["details"] = exc.details
    return body
