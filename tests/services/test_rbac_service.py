"""
RBAC Service Unit Tests
=======================

Tests for RBACService covering:
- Listing role permissions
- Assigning and removing permissions
- Permission checks for admin, manager, user and role-less accounts
"""

from uuid import uuid4

import pytest
from sqlalchemy.orm import Session

from reportflow.core.exceptions import NotFoundError
from reportflow.models.role import Role
from reportflow.models.user import User
from reportflow.repositories import get_repository_factory
from reportflow.services.rbac_service import RBACService


pytestmark = [pytest.mark.unit, pytest.mark.rbac]


@pytest.fixture
def empty_role(db_session: Session) -> Role:
    return get_repository_factory().roles(db_session).create({"name": "Auditor"})


@pytest.fixture
def report_permissions(db_session: Session):
    permissions = get_repository_factory().permissions(db_session)
    return [
        permissions.create({"name": "reports:create", "resource": "reports", "action": "create"}),
        permissions.create({"name": "reports:delete", "resource": "reports", "action": "delete"}),
    ]


class TestRolePermissions:
    """Tests for reading and changing a role's permissions."""

    def test_seeded_user_role_permissions(self, db_session: Session, user_role: Role):
        # Act
        permissions = RBACService(db_session).get_role_permissions(user_role.id)

        # Assert
        assert sorted(p.name for p in permissions) == ["reports:read", "users:read"]

    def test_get_permissions_unknown_role(self, db_session: Session):
        with pytest.raises(NotFoundError):
            RBACService(db_session).get_role_permissions(uuid4())

    def test_assign_permissions(self, db_session: Session, empty_role: Role, report_permissions):
        # Arrange
        ids = [p.id for p in report_permissions]

        # Act
        role = RBACService(db_session).assign_permissions(empty_role.id, ids)

        # Assert
        assert set(role.permission_ids) == set(ids)

    def test_assign_permissions_is_idempotent(self, db_session: Session, empty_role: Role, report_permissions):
        # Arrange
        rbac = RBACService(db_session)
        ids = [p.id for p in report_permissions]
        rbac.assign_permissions(empty_role.id, ids)

        # Act
        role = rbac.assign_permissions(empty_role.id, ids + ids)

        # Assert
        assert len(role.permission_ids) == 2

    def test_assign_unknown_permission(self, db_session: Session, empty_role: Role):
        # Act
        with pytest.raises(NotFoundError) as exc_info:
            RBACService(db_session).assign_permissions(empty_role.id, [uuid4()])

        # Assert
        assert "Permission" in exc_info.value.message
        assert empty_role.permission_ids == []

    def test_assign_to_unknown_role(self, db_session: Session, report_permissions):
        with pytest.raises(NotFoundError):
            RBACService(db_session).assign_permissions(uuid4(), [report_permissions[0].id])

    def test_remove_permissions(self, db_session: Session, empty_role: Role, report_permissions):
        # Arrange
        rbac = RBACService(db_session)
        rbac.assign_permissions(empty_role.id, [p.id for p in report_permissions])

        # Act
        role = rbac.remove_permissions(empty_role.id, [report_permissions[0].id, uuid4()])

        # Assert
        assert role.permission_ids == [report_permissions[1].id]

    def test_deleting_permission_removes_grant(self, db_session: Session, empty_role: Role, report_permissions):
        # Arrange
        rbac = RBACService(db_session)
        rbac.assign_permissions(empty_role.id, [report_permissions[0].id])

        # Act
        get_repository_factory().permissions(db_session).delete(report_permissions[0].id)
        db_session.expire_all()

        # Assert
        assert rbac.get_role_permissions(empty_role.id) == []


class TestUserHasPermission:
    """Tests for permission evaluation."""

    def test_admin_has_every_permission(self, sample_admin: User):
        assert RBACService.user_has_permission(sample_admin, "billing", "delete") is True

    def test_user_reads_reports(self, sample_user: User):
        assert RBACService.user_has_permission(sample_user, "reports", "read") is True

    def test_user_cannot_create_reports(self, sample_user: User):
        assert RBACService.user_has_permission(sample_user, "reports", "create") is False

    def test_manage_implies_every_action(self, sample_manager: User):
        # users:manage is granted to the Manager role
        for action in ("create", "read", "update", "delete"):
            assert RBACService.user_has_permission(sample_manager, "users", action) is True
        assert RBACService.user_has_permission(sample_manager, "roles", "read") is False

    def test_user_without_role(self, roleless_user: User):
        assert RBACService.user_has_permission(roleless_user, "reports", "read") is False
