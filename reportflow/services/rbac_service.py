"""
RBAC Service Module
===================

Role/permission assignment on top of the role_permissions join table.

Usage:
    rbac = RBACService(db)
    rbac.assign_permissions(role_id, [permission_id])
    rbac.user_has_permission(user, "reports", "read")
"""

from typing import Iterable, List
from uuid import UUID

from sqlalchemy.orm import Session

from reportflow.core.exceptions import NotFoundError
from reportflow.core.logging import get_logger
from reportflow.models import Permission, Role, User
from reportflow.repositories import get_repository_factory

# Initialize logger
logger = get_logger(__name__)


class RBACService:
    """Reads and changes the permissions granted to roles."""

    def __init__(self, db: Session):
        self.db = db
        factory = get_repository_factory()
        self.roles = factory.roles(db)
        self.permissions = factory.permissions(db)

    def _get_role(self, role_id: UUID) -> Role:
        role = self.roles.find_by_id(role_id)
        if role is None:
            raise NotFoundError("Role", role_id)
        return role

    def get_role_permissions(self, role_id: UUID) -> List[Permission]:
        """
        Permissions granted to a role.

        Ids whose permission row no longer exists are skipped.

        Raises:
            NotFoundError: If the role does not exist
        """
        self._get_role(role_id)
        permissions = []
        for permission_id in self.roles.get_permissions(role_id):
            permission = self.permissions.find_by_id(permission_id)
            if permission is not None:
                permissions.append(permission)
        return permissions

    def assign_permissions(self, role_id: UUID, permission_ids: Iterable[UUID]) -> Role:
        """
        Grant permissions to a role. Already granted ids are ignored.

        Raises:
            NotFoundError: If the role or any permission does not exist
        """
        self._get_role(role_id)
        permission_ids = list(permission_ids)
        for permission_id in permission_ids:
            if self.permissions.find_by_id(permission_id) is None:
                raise NotFoundError("Permission", permission_id)

        role = self.roles.assign_permissions(role_id, permission_ids)
        logger.info(
            "Permissions assigned to role",
            extra={"role_id": str(role_id), "count": len(permission_ids)}
        )
        return role

    def remove_permissions(self, role_id: UUID, permission_ids: Iterable[UUID]) -> Role:
        """
        Revoke permissions from a role. Ids not granted are ignored.

        Raises:
            NotFoundError: If the role does not exist
        """
        self._get_role(role_id)
        permission_ids = list(permission_ids)
        role = self.roles.remove_permissions(role_id, permission_ids)
        logger.info(
            "Permissions removed from role",
            extra={"role_id": str(role_id), "count": len(permission_ids)}
        )
        return role

    @staticmethod
    def user_has_permission(user: User, resource: str, action: str) -> bool:
        """
        Admin accounts hold every permission. Other users need a role
        granting ``action`` (or ``manage``) on ``resource``.
        """
        if user.is_admin:
            return True
        role = user.assigned_role
        if role is None:
            return False
        return role.has_permission(resource, action)
