"""
Model Package Initialization
============================

Ensures models are properly registered when imported by the application.

All SQLAlchemy ORM models are exported from this module.

Usage:
    from reportflow.models import User, Organization, Role
"""

from .organization import Organization
from .role import Permission, Role, role_permissions
from .user import User
from .report import Report
from .subscription import Subscription
from .setting import Setting
from .audit_log import AuditLog

__all__ = [
    "Organization",
    "Permission",
    "Role",
    "role_permissions",
    "User",
    "Report",
    "Subscription",
    "Setting",
    "AuditLog",
]
