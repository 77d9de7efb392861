"""
Test Configuration and Fixtures
================================

Central configuration for pytest with all shared fixtures.

Features:
- SQLite in-memory database for testing
- Default roles, permissions, organization and settings seeded per test
- TestClient setup, anonymous and signed in (session cookie)
- Fixtures for sample users, organizations and reports
- Dependency overrides for database session
"""

import os
import uuid
from typing import Callable, Generator, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

# Set testing environment before importing reportflow modules
os.environ["ENVIRONMENT"] = "testing"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only-min-32-chars"
os.environ["DATABASE_PROVIDER"] = "sqlite"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"  # Disable rate limiting in tests
os.environ["DATABASE_AUTO_INIT"] = "false"

from reportflow.core.config import settings
from reportflow.core.enums import ReportType, UserRole
from reportflow.db.base import Base
from reportflow.db.init_db import ADMIN_ROLE, DEFAULT_ORGANIZATION, MANAGER_ROLE, USER_ROLE, init_database
from reportflow.db.session import get_db
from reportflow.models import Organization, Report, Role, User
from reportflow.repositories import get_repository_factory
from reportflow.services.auth_service import AuthService
from reportflow.main import app as main_app


TEST_PASSWORD = "TestPassword123!"


# =====================================
# Database Configuration
# =====================================

# Create in-memory SQLite engine for testing
# StaticPool is used to maintain the same connection across tests
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

# Enable foreign key constraints for SQLite
@event.listens_for(engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    """Enable foreign key constraints for SQLite."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestingSessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False,
)


# =====================================
# Database Fixtures
# =====================================

@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """
    Create a fresh, seeded database session for each test.

    Creates all tables and seeds the default roles, permissions,
    organization and public settings before each test, and drops
    everything afterwards.

    Yields:
        SQLAlchemy Session object
    """
    session = TestingSessionLocal()
    init_database(session)

    try:
        yield session
    finally:
        session.close()
        # Drop all tables after test
        Base.metadata.drop_all(bind=engine)


def _override_get_db(db_session: Session):
    def override_get_db():
        try:
            yield db_session
        finally:
            pass
    return override_get_db


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """
    Anonymous TestClient with database dependency override.

    Yields:
        TestClient instance
    """
    main_app.dependency_overrides[get_db] = _override_get_db(db_session)

    with TestClient(main_app) as test_client:
        yield test_client

    main_app.dependency_overrides.clear()


@pytest.fixture
def client_for(db_session: Session) -> Generator[Callable[[Optional[User]], TestClient], None, None]:
    """
    Build TestClients carrying a session cookie for a given user.

    Redirects are not followed so page tests can assert on them.
    """
    main_app.dependency_overrides[get_db] = _override_get_db(db_session)

    def make_client(user: Optional[User] = None) -> TestClient:
        cookies = {}
        if user is not None:
            cookies[settings.SESSION_COOKIE_NAME] = AuthService.create_session_token(user)
        return TestClient(main_app, cookies=cookies, follow_redirects=False)

    yield make_client

    main_app.dependency_overrides.clear()


# =====================================
# Organization and Role Fixtures
# =====================================

@pytest.fixture
def default_organization(db_session: Session) -> Organization:
    return get_repository_factory().organizations(db_session).find_by_name(DEFAULT_ORGANIZATION)


@pytest.fixture
def sample_organization(db_session: Session) -> Organization:
    """
    Create a sample organization for testing.

    Args:
        db_session: Database session

    Returns:
        Organization instance
    """
    org = Organization(
        id=uuid.uuid4(),
        name="Test Organization",
        email="contact@testorg.com",
    )
    db_session.add(org)
    db_session.commit()
    db_session.refresh(org)
    return org


@pytest.fixture
def second_organization(db_session: Session) -> Organization:
    org = Organization(
        id=uuid.uuid4(),
        name="Second Organization",
    )
    db_session.add(org)
    db_session.commit()
    db_session.refresh(org)
    return org


@pytest.fixture
def admin_role(db_session: Session) -> Role:
    return get_repository_factory().roles(db_session).find_by_name(ADMIN_ROLE)


@pytest.fixture
def user_role(db_session: Session) -> Role:
    return get_repository_factory().roles(db_session).find_by_name(USER_ROLE)


@pytest.fixture
def manager_role(db_session: Session) -> Role:
    return get_repository_factory().roles(db_session).find_by_name(MANAGER_ROLE)


# =====================================
# User Fixtures
# =====================================

@pytest.fixture
def make_user(db_session: Session) -> Callable[..., User]:
    """
    Factory fixture creating users with TEST_PASSWORD.

    Keyword arguments are passed straight to the User model.
    """
    def _make_user(email: str, **fields) -> User:
        fields.setdefault("hashed_password", AuthService.hash_password(TEST_PASSWORD))
        user = User(id=uuid.uuid4(), email=email, **fields)
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def sample_user(make_user, sample_organization: Organization, user_role: Role) -> User:
    """
    Regular user holding the default "User" role.

    Returns:
        User instance
    """
    return make_user(
        "user@testorg.com",
        name="Test User",
        role=UserRole.USER.value,
        role_id=user_role.id,
        organization_id=sample_organization.id,
    )


@pytest.fixture
def sample_manager(make_user, sample_organization: Organization, manager_role: Role) -> User:
    return make_user(
        "manager@testorg.com",
        name="Test Manager",
        role=UserRole.USER.value,
        role_id=manager_role.id,
        organization_id=sample_organization.id,
    )


@pytest.fixture
def sample_admin(make_user, sample_organization: Organization, admin_role: Role) -> User:
    """
    Admin account (account type "admin" plus the Admin role).

    Returns:
        User instance
    """
    return make_user(
        "admin@testorg.com",
        name="Test Admin",
        role=UserRole.ADMIN.value,
        role_id=admin_role.id,
        organization_id=sample_organization.id,
    )


@pytest.fixture
def roleless_user(make_user, second_organization: Organization) -> User:
    return make_user(
        "norole@secondorg.com",
        role=UserRole.USER.value,
        organization_id=second_organization.id,
    )


@pytest.fixture
def sample_locked_user(make_user, sample_organization: Organization, user_role: Role) -> User:
    return make_user(
        "locked@testorg.com",
        role_id=user_role.id,
        organization_id=sample_organization.id,
        is_locked=True,
        failed_attempts=settings.MAX_LOGIN_ATTEMPTS,
    )


@pytest.fixture
def sample_inactive_user(make_user, sample_organization: Organization, user_role: Role) -> User:
    return make_user(
        "inactive@testorg.com",
        role_id=user_role.id,
        organization_id=sample_organization.id,
        is_active=False,
    )


# =====================================
# Signed In Clients
# =====================================

@pytest.fixture
def admin_client(client_for, sample_admin: User) -> TestClient:
    return client_for(sample_admin)


@pytest.fixture
def user_client(client_for, sample_user: User) -> TestClient:
    return client_for(sample_user)


@pytest.fixture
def manager_client(client_for, sample_manager: User) -> TestClient:
    return client_for(sample_manager)


# =====================================
# Report Fixtures
# =====================================

@pytest.fixture
def sample_report(db_session: Session, sample_user: User, sample_organization: Organization) -> Report:
    return get_repository_factory().reports(db_session).create({
        "name": "Monthly Revenue",
        "description": "Revenue per month",
        "type": ReportType.FINANCIAL.value,
        "config": '{"columns": ["month", "revenue"]}',
        "created_by_id": sample_user.id,
        "organization_id": sample_organization.id,
        "is_public": False,
    })


@pytest.fixture
def public_report(db_session: Session, sample_admin: User) -> Report:
    return get_repository_factory().reports(db_session).create({
        "name": "Platform Usage",
        "type": ReportType.USAGE.value,
        "config": "{}",
        "created_by_id": sample_admin.id,
        "is_public": True,
    })


# =====================================
# Utility Fixtures
# =====================================

@pytest.fixture
def test_password() -> str:
    """Return the password every fixture user is created with."""
    return TEST_PASSWORD
