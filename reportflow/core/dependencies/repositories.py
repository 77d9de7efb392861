"""
Repository Dependencies
=======================

Per-request repositories bound to the request's database session.

Usage:
    @router.get("/roles")
    def list_roles(roles: RoleRepository = Depends(get_role_repository)):
        return roles.find_all()
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from reportflow.db.session import get_db
from reportflow.repositories import (
    AuditLogRepository,
    OrganizationRepository,
    PermissionRepository,
    ReportRepository,
    RoleRepository,
    SettingRepository,
    SubscriptionRepository,
    UserRepository,
    get_repository_factory,
)


def get_user_repository(db: Session = Depends(get_db)) -> UserRepository:
    return get_repository_factory().users(db)


def get_role_repository(db: Session = Depends(get_db)) -> RoleRepository:
    return get_repository_factory().roles(db)


def get_permission_repository(db: Session = Depends(get_db)) -> PermissionRepository:
    return get_repository_factory().permissions(db)


def get_organization_repository(db: Session = Depends(get_db)) -> OrganizationRepository:
    return get_repository_factory().organizations(db)


def get_report_repository(db: Session = Depends(get_db)) -> ReportRepository:
    return get_repository_factory().reports(db)


def get_subscription_repository(db: Session = Depends(get_db)) -> SubscriptionRepository:
    return get_repository_factory().subscriptions(db)


def get_setting_repository(db: Session = Depends(get_db)) -> SettingRepository:
    return get_repository_factory().settings(db)


def get_audit_log_repository(db: Session = Depends(get_db)) -> AuditLogRepository:
    return get_repository_factory().audit_logs(db)
