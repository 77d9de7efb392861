"""
Role-Based Access Control (RBAC) Dependencies Module
=====================================================

FastAPI dependencies for authorization.

Features:
- Admin-only back-office guard
- Permission checks against the user's RBAC role
- Audit logging for unauthorized access

Usage:
    @router.get("/reports")
    def list_reports(user: User = Depends(require_permission("reports", "read"))):
        ...
"""

from typing import Callable

from fastapi import Depends, Request

from reportflow.core.dependencies.auth import get_current_user
from reportflow.core.exceptions import AuthorizationError, PermissionDeniedError
from reportflow.core.logging import get_logger, security_logger
from reportflow.models.user import User
from reportflow.services.rbac_service import RBACService

# Initialize logger
logger = get_logger(__name__)


# =====================================
# Admin Only
# =====================================

def require_admin(
    request: Request,
    current_user: User = Depends(get_current_user),
) -> User:
    """
    Dependency that requires the admin account type.

    Raises:
        AuthorizationError: 403 if the user is not an admin
    """
    if not current_user.is_admin:
        security_logger.log_unauthorized_access(
            user_id=str(current_user.id),
            resource=request.url.path,
            action=request.method,
        )

        raise AuthorizationError("Admin privileges required")

    return current_user


# =====================================
# Permission Requirement
# =====================================

def require_permission(resource: str, action: str) -> Callable:
    """
    Create a dependency that requires ``resource:action``.

    Admins always pass. Other users pass when their role grants the
    action, or ``manage``, on the resource.

    Usage:
        @router.post("/reports")
        def create(user: User = Depends(require_permission("reports", "create"))):
            ...
    """
    def permission_checker(
        request: Request,
        current_user: User = Depends(get_current_user),
    ) -> User:
        if not RBACService.user_has_permission(current_user, resource, action):
            security_logger.log_unauthorized_access(
                user_id=str(current_user.id),
                resource=request.url.path,
                action=request.method,
            )

            logger.warning(
                "Permission denied",
                extra={
                    "required_permission": f"{resource}:{action}",
                    "role_id": str(current_user.role_id) if current_user.role_id else None,
                    "path": request.url.path,
                }
            )

            raise PermissionDeniedError(resource, action)

        return current_user

    return permission_checker
