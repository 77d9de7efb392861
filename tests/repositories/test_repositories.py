"""
Repository Tests
================

Tests for the SQLAlchemy repositories and the repository factory.
"""

from uuid import uuid4

import pytest
from sqlalchemy.orm import Session

from reportflow.core.exceptions import ConflictError
from reportflow.db.providers import get_database_provider
from reportflow.models.organization import Organization
from reportflow.models.user import User
from reportflow.repositories import RepositoryFactory, get_repository_factory
from reportflow.repositories.sql import OrganizationRepository, UserRepository


pytestmark = pytest.mark.repository


class TestRepositoryFactory:
    """Tests for the repository factory singleton."""

    def test_singleton(self):
        assert get_repository_factory() is RepositoryFactory.get_instance()

    def test_bound_to_active_provider(self):
        factory = get_repository_factory()

        assert factory.provider is get_database_provider()
        assert factory.provider_type == "sqlite"

    def test_reset_instance_builds_new_factory(self):
        # Arrange
        first = get_repository_factory()

        # Act
        RepositoryFactory.reset_instance()
        second = get_repository_factory()

        # Assert
        assert first is not second

    def test_register_override(self, db_session: Session):
        # Arrange
        class AuditedUserRepository(UserRepository):
            pass

        factory = RepositoryFactory(get_database_provider())

        # Act
        factory.register("users", AuditedUserRepository)

        # Assert
        assert isinstance(factory.users(db_session), AuditedUserRepository)

    def test_unknown_repository(self, db_session: Session):
        factory = RepositoryFactory(get_database_provider())

        with pytest.raises(KeyError):
            factory.create("invoices", db_session)


class TestGenericCrud:
    """Generic CRUD through OrganizationRepository."""

    def test_create_find_update_delete(self, db_session: Session):
        # Arrange
        organizations = OrganizationRepository(db_session)

        # Act
        created = organizations.create({"name": "Crud Org"})
        found = organizations.find_by_id(created.id)
        updated = organizations.update(created.id, {"description": "Updated"})
        deleted = organizations.delete(created.id)

        # Assert
        assert found is created
        assert updated.description == "Updated"
        assert deleted is True
        assert organizations.find_by_id(created.id) is None

    def test_missing_entities(self, db_session: Session):
        organizations = OrganizationRepository(db_session)
        missing = uuid4()

        assert organizations.update(missing, {"name": "x"}) is None
        assert organizations.delete(missing) is False

    def test_unique_violation_raises_conflict(self, db_session: Session, sample_organization: Organization):
        # Act
        with pytest.raises(ConflictError):
            OrganizationRepository(db_session).create({"name": sample_organization.name})

        # Assert: the session is usable after the rollback
        assert OrganizationRepository(db_session).count() == 2

    def test_find_all_pagination(self, db_session: Session):
        # Arrange
        organizations = OrganizationRepository(db_session)
        for index in range(4):
            organizations.create({"name": f"Org {index}"})

        # Act & Assert
        assert organizations.count() == 5
        assert len(organizations.find_all(limit=2)) == 2
        assert len(organizations.find_all(limit=10, offset=3)) == 2


class TestUserRepository:
    """Finders on UserRepository."""

    def test_email_is_normalized(self, db_session: Session):
        # Act
        user = UserRepository(db_session).create({"email": "  Mixed@Example.COM ", "hashed_password": "s:h"})

        # Assert
        assert user.email == "mixed@example.com"
        assert UserRepository(db_session).find_by_email("MIXED@example.com") is user

    def test_counts(self, db_session: Session, sample_user: User, sample_locked_user: User, sample_inactive_user: User):
        users = UserRepository(db_session)

        assert users.count() == 3
        assert users.count_active() == 2
        assert users.count_locked() == 1

    def test_find_by_role(self, db_session: Session, sample_user: User, sample_manager: User):
        users = UserRepository(db_session)

        assert users.find_by_role(sample_manager.role_id) == [sample_manager]


class TestAppendOnlyAuditLogs:
    """Audit log repository refuses changes."""

    def test_update_and_delete_not_supported(self, db_session: Session, sample_user: User):
        # Arrange
        audit_logs = get_repository_factory().audit_logs(db_session)
        entry = audit_logs.create({"user_id": sample_user.id, "action": "LOGIN", "entity_type": "USER"})

        # Act & Assert
        with pytest.raises(NotImplementedError):
            audit_logs.update(entry.id, {"action": "LOGOUT"})
        with pytest.raises(NotImplementedError):
            audit_logs.delete(entry.id)
