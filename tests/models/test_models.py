"""
Model Unit Tests
================

Tests for SQLAlchemy models including:
- User account helpers
- Permission and role grants
- Timestamps and relationship cascades
"""

import pytest
from sqlalchemy.orm import Session

from reportflow.core.enums import UserRole
from reportflow.models.organization import Organization
from reportflow.models.role import Permission, Role
from reportflow.models.subscription import Subscription
from reportflow.models.user import User


pytestmark = pytest.mark.unit


class TestUserModel:
    """Tests for the User model."""

    def test_defaults(self):
        # Act
        user = User(email="defaults@example.com", hashed_password="s:h")

        # Assert
        assert user.role == UserRole.USER.value
        assert user.is_active is True
        assert user.is_locked is False
        assert user.failed_attempts == 0
        assert user.token_version == 1
        assert user.is_admin is False

    def test_increment_failed_attempts_locks(self):
        # Arrange
        user = User(email="lock@example.com", hashed_password="s:h")

        # Act
        results = [user.increment_failed_attempts(max_attempts=3) for _ in range(3)]

        # Assert
        assert results == [False, False, True]
        assert user.is_locked is True

    def test_unlock_resets_attempts(self):
        user = User(email="unlock@example.com", hashed_password="s:h", is_locked=True, failed_attempts=5)

        user.unlock_account()

        assert user.is_locked is False
        assert user.failed_attempts == 0

    def test_to_dict_excludes_password(self, sample_user: User):
        data = sample_user.to_dict()

        assert "hashed_password" not in data
        assert data["email"] == sample_user.email
        assert data["organization_id"] == str(sample_user.organization_id)

    def test_timestamps_set_by_database(self, sample_user: User):
        assert sample_user.created_at is not None
        assert sample_user.updated_at is not None


class TestPermissionGrants:
    """Tests for Permission.grants and Role.has_permission."""

    def test_exact_action(self):
        permission = Permission(name="reports:read", resource="reports", action="read")

        assert permission.grants("reports", "read") is True
        assert permission.grants("reports", "update") is False
        assert permission.grants("users", "read") is False

    def test_manage_covers_all_actions(self):
        permission = Permission(name="reports:manage", resource="reports", action="manage")

        assert all(permission.grants("reports", action) for action in ("create", "read", "update", "delete"))

    def test_role_has_permission(self, user_role: Role):
        assert user_role.has_permission("users", "read") is True
        assert user_role.has_permission("users", "delete") is False


class TestCascades:
    """Foreign key behaviour on delete."""

    def test_deleting_organization_detaches_users(
        self, db_session: Session, sample_user: User, sample_organization: Organization
    ):
        # Act
        db_session.delete(sample_organization)
        db_session.commit()
        db_session.refresh(sample_user)

        # Assert
        assert sample_user.organization_id is None

    def test_deleting_user_removes_subscriptions(self, db_session: Session, sample_user: User):
        # Arrange
        db_session.add(Subscription(user_id=sample_user.id, plan="free", status="active"))
        db_session.commit()

        # Act
        db_session.delete(sample_user)
        db_session.commit()

        # Assert
        assert db_session.query(Subscription).count() == 0

    def test_deleting_role_clears_user_role(self, db_session: Session, sample_manager: User, manager_role: Role):
        # Act
        db_session.delete(manager_role)
        db_session.commit()
        db_session.refresh(sample_manager)

        # Assert
        assert sample_manager.role_id is None
