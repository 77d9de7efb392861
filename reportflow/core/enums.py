"""
Enumeration Module
==================

Defines enumerations used across the application.
"""

from enum import Enum


class UserRole(str, Enum):
    """Coarse account type. Admins can use the back-office."""

    USER = "user"
    ADMIN = "admin"


class PermissionAction(str, Enum):
    """Actions a permission can grant on a resource."""

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    MANAGE = "manage"


class ReportType(str, Enum):
    FINANCIAL = "financial"
    USAGE = "usage"
    PERFORMANCE = "performance"
    CUSTOM = "custom"


class SubscriptionPlan(str, Enum):
    FREE = "free"
    BASIC = "basic"
    PREMIUM = "premium"


class SubscriptionStatus(str, Enum):
    ACTIVE = "active"
    CANCELED = "canceled"
    EXPIRED = "expired"


class AuditAction(str, Enum):
    """Actions recorded in the audit trail."""

    CREATE = "CREATE"
    READ = "READ"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"
    REGISTER = "REGISTER"
    FAILED_LOGIN = "FAILED_LOGIN"


class EntityType(str, Enum):
    """Kinds of entity an audit entry can refer to."""

    USER = "USER"
    SUBSCRIPTION = "SUBSCRIPTION"
    REPORT = "REPORT"
    SYSTEM = "SYSTEM"
    ORGANIZATION = "ORGANIZATION"
    ROLE = "ROLE"
    PERMISSION = "PERMISSION"
    SETTING = "SETTING"
