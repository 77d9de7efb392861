"""
Repository Factory
==================

Lazily initialized singleton that hands out repositories bound to a
database session.

Features:
- One registry of repository classes per process
- Registry rebuilt when the configured provider type changes
- Per-entity overrides through ``register``

Usage:
    factory = RepositoryFactory.get_instance()
    roles = factory.roles(db)
    role = roles.find_by_name("Admin")
"""

import threading
from typing import Dict, Optional, Type

from sqlalchemy.orm import Session

from reportflow.core.logging import get_logger
from reportflow.db.providers import DatabaseProvider, get_database_provider
from reportflow.repositories.base import SQLAlchemyRepository
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

# Initialize logger
logger = get_logger(__name__)


DEFAULT_REPOSITORIES: Dict[str, Type[SQLAlchemyRepository]] = {
    "users": UserRepository,
    "roles": RoleRepository,
    "permissions": PermissionRepository,
    "organizations": OrganizationRepository,
    "reports": ReportRepository,
    "subscriptions": SubscriptionRepository,
    "settings": SettingRepository,
    "audit_logs": AuditLogRepository,
}


class RepositoryFactory:
    """Creates repositories for the active database provider."""

    _instance: Optional["RepositoryFactory"] = None
    _lock = threading.Lock()

    def __init__(self, provider: DatabaseProvider):
        self.provider = provider
        self.provider_type = provider.name
        self._registry: Dict[str, Type[SQLAlchemyRepository]] = dict(DEFAULT_REPOSITORIES)

    # ==========================
    # Singleton Access
    # ==========================

    @classmethod
    def get_instance(cls) -> "RepositoryFactory":
        """
        Get the factory, creating it on first use.

        If the provider in use changed since the factory was built
        (for example after ``reset_database_provider``), the registry
        is rebuilt for the new provider.
        """
        provider = get_database_provider()
        if cls._instance is None or cls._instance.provider is not provider:
            with cls._lock:
                if cls._instance is None or cls._instance.provider is not provider:
                    previous = cls._instance.provider_type if cls._instance else None
                    cls._instance = cls(provider)
                    logger.info(
                        "Repository factory initialized",
                        extra={"provider": provider.name, "previous_provider": previous}
                    )
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        with cls._lock:
            cls._instance = None

    # ==========================
    # Registry
    # ==========================

    def register(self, name: str, repository_class: Type[SQLAlchemyRepository]) -> None:
        """Override the repository class used for ``name``."""
        if name not in self._registry:
            raise KeyError(f"Unknown repository: {name}")
        self._registry[name] = repository_class

    def create(self, name: str, db: Session) -> SQLAlchemyRepository:
        try:
            repository_class = self._registry[name]
        except KeyError:
            raise KeyError(f"Unknown repository: {name}") from None
        return repository_class(db)

    # ==========================
    # Typed Accessors
    # ==========================

    def users(self, db: Session) -> UserRepository:
        return self.create("users", db)

    def roles(self, db: Session) -> RoleRepository:
        return self.create("roles", db)

    def permissions(self, db: Session) -> PermissionRepository:
        return self.create("permissions", db)

    def organizations(self, db: Session) -> OrganizationRepository:
        return self.create("organizations", db)

    def reports(self, db: Session) -> ReportRepository:
        return self.create("reports", db)

    def subscriptions(self, db: Session) -> SubscriptionRepository:
        return self.create("subscriptions", db)

    def settings(self, db: Session) -> SettingRepository:
        return self.create("settings", db)

    def audit_logs(self, db: Session) -> AuditLogRepository:
        return self.create("audit_logs", db)


def get_repository_factory() -> RepositoryFactory:
    return RepositoryFactory.get_instance()
