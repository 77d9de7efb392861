"""
Database Initialisation
=======================

Creates the schema through the active provider's engine and seeds the
default RBAC catalogue, organization and public settings.

Seeding is idempotent: existing rows (matched by their unique name or
key) are left untouched, so it is safe to run on every start-up.

Usage:
    from reportflow.db.init_db import init_database
    with get_db_session() as db:
        init_database(db)
"""

from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from reportflow.core.config import settings
from reportflow.core.enums import PermissionAction, UserRole
from reportflow.core.logging import get_logger, log_execution_time
from reportflow.db.base import Base
from reportflow.models import Permission, Role, User
from reportflow.repositories import get_repository_factory
from reportflow.services.auth_service import AuthService

# Initialize logger
logger = get_logger(__name__)


# ==========================
# Seed Data
# ==========================

ADMIN_ROLE = "Admin"
USER_ROLE = "User"
MANAGER_ROLE = "Manager"

DEFAULT_ROLES = {
    ADMIN_ROLE: "Full access to every resource",
    USER_ROLE: "Reads reports and users",
    MANAGER_ROLE: "Reads reports and manages users",
}

# (name, resource, action, description)
DEFAULT_PERMISSIONS = [
    ("users:manage", "users", PermissionAction.MANAGE, "Manage users"),
    ("roles:manage", "roles", PermissionAction.MANAGE, "Manage roles"),
    ("permissions:manage", "permissions", PermissionAction.MANAGE, "Manage permissions"),
    ("organizations:manage", "organizations", PermissionAction.MANAGE, "Manage organizations"),
    ("settings:manage", "settings", PermissionAction.MANAGE, "Manage settings"),
    ("reports:manage", "reports", PermissionAction.MANAGE, "Manage reports"),
    ("subscriptions:manage", "subscriptions", PermissionAction.MANAGE, "Manage subscriptions"),
    ("reports:read", "reports", PermissionAction.READ, "View reports"),
    ("users:read", "users", PermissionAction.READ, "View users"),
]

ROLE_GRANTS: Dict[str, Optional[List[str]]] = {
    # None grants every default permission
    ADMIN_ROLE: None,
    MANAGER_ROLE: ["reports:read", "users:read", "users:manage"],
    USER_ROLE: ["reports:read", "users:read"],
}

DEFAULT_ORGANIZATION = "Default Organization"

DEFAULT_SETTINGS = [
    ("site_name", settings.APP_NAME, "Name shown on the public site"),
    ("support_email", "support@reportflow.local", "Public support contact"),
]


# ==========================
# Schema
# ==========================

def create_tables(db: Session) -> None:
    """Create every table known to the ORM metadata."""
    # Registers every model on Base.metadata
    import reportflow.models  # noqa: F401

    Base.metadata.create_all(bind=db.get_bind())


# ==========================
# Seeding
# ==========================

def seed_permissions(db: Session) -> Dict[str, Permission]:
    permissions = get_repository_factory().permissions(db)
    seeded = {}
    for name, resource, action, description in DEFAULT_PERMISSIONS:
        permission = permissions.find_by_name(name)
        if permission is None:
            permission = permissions.create({
                "name": name,
                "resource": resource,
                "action": action.value,
                "description": description,
            })
        seeded[name] = permission
    return seeded


def seed_roles(db: Session, permissions: Dict[str, Permission]) -> Dict[str, Role]:
    roles = get_repository_factory().roles(db)
    seeded = {}
    for name, description in DEFAULT_ROLES.items():
        role = roles.find_by_name(name)
        if role is not None:
            # Grants on existing roles belong to the admins
            seeded[name] = role
            continue

        role = roles.create({"name": name, "description": description})
        granted = ROLE_GRANTS.get(name)
        names = list(permissions) if granted is None else granted
        seeded[name] = roles.assign_permissions(role.id, [permissions[n].id for n in names])
    return seeded


def seed_organization(db: Session) -> None:
    organizations = get_repository_factory().organizations(db)
    if organizations.find_by_name(DEFAULT_ORGANIZATION) is None:
        organizations.create({
            "name": DEFAULT_ORGANIZATION,
            "description": "Organization created at installation",
        })


def seed_settings(db: Session) -> None:
    settings_repo = get_repository_factory().settings(db)
    for key, value, description in DEFAULT_SETTINGS:
        if settings_repo.find_by_key(key) is None:
            settings_repo.create({
                "key": key,
                "value": value,
                "description": description,
                "is_public": True,
            })


@log_execution_time(logger, "init_database")
def init_database(db: Session, create_schema: bool = True) -> None:
    """
    Create tables (optionally) and seed default data.

    Args:
        db: Database session
        create_schema: Run ``create_all`` before seeding
    """
    if create_schema:
        create_tables(db)

    permissions = seed_permissions(db)
    seed_roles(db, permissions)
    seed_organization(db)
    seed_settings(db)

    logger.info(
        "Database seeded",
        extra={
            "permissions": len(permissions),
            "roles": len(DEFAULT_ROLES),
        }
    )


# ==========================
# Admin Account
# ==========================

def create_admin(
    db: Session,
    email: str,
    password: str,
    name: Optional[str] = None,
) -> User:
    """
    Create an admin account, or promote an existing account.

    The user gets the admin account type and the Admin role. An
    existing user keeps their password.
    """
    factory = get_repository_factory()
    users = factory.users(db)
    admin_role = factory.roles(db).find_by_name(ADMIN_ROLE)
    organization = factory.organizations(db).find_by_name(DEFAULT_ORGANIZATION)

    values = {
        "role": UserRole.ADMIN.value,
        "role_id": admin_role.id if admin_role else None,
        "is_active": True,
    }

    user = users.find_by_email(email)
    if user is not None:
        user = users.update(user.id, values)
        logger.info("Existing user promoted to admin", extra={"user_id": str(user.id)})
        return user

    user = users.create({
        **values,
        "email": email,
        "name": name,
        "hashed_password": AuthService.hash_password(password),
        "organization_id": organization.id if organization else None,
    })
    logger.info("Admin user created", extra={"user_id": str(user.id)})
    return user
