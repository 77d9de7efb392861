"""
Repository Package
==================

Data-access layer between route handlers and the ORM.

Usage:
    from reportflow.repositories import get_repository_factory

    users = get_repository_factory().users(db)
"""

from reportflow.repositories.base import BaseRepository, SQLAlchemyRepository
from reportflow.repositories.sql import (
    AuditLogRepository,
    OrganizationRepository,
    PermissionRepository,
    ReportRepository,
    RoleRepository,
    SettingRepository,
    SubscriptionRepository,
    UserRepository,
)
from reportflow.repositories.factory import RepositoryFactory, get_repository_factory

__all__ = [
    "BaseRepository",
    "SQLAlchemyRepository",
    "AuditLogRepository",
    "OrganizationRepository",
    "PermissionRepository",
    "ReportRepository",
    "RoleRepository",
    "SettingRepository",
    "SubscriptionRepository",
    "UserRepository",
    "RepositoryFactory",
    "get_repository_factory",
]
