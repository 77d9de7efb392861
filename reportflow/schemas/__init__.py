"""
Schemas Package Initialization
==============================

Exports all Pydantic schemas for the application.

Usage:
    from reportflow.schemas import LoginRequest, UserResponse
"""

# Common schemas
from reportflow.schemas.common import (
    ErrorResponse,
    SuccessResponse,
    ValidationErrorDetail,
    ValidationErrorResponse,
    model_values,
)

# Auth schemas
from reportflow.schemas.auth import (
    LoginRequest,
    LoginResponse,
    LogoutResponse,
    RegisterRequest,
)

# User schemas
from reportflow.schemas.user import (
    AccountUnlockResponse,
    RoleIdRequest,
    UserIdRequest,
    UserResponse,
    UserUpdate,
)

# Organization schemas
from reportflow.schemas.organization import (
    OrganizationCreate,
    OrganizationResponse,
    OrganizationUpdate,
)

# Role & permission schemas
from reportflow.schemas.role import (
    PermissionCreate,
    PermissionIdsRequest,
    PermissionResponse,
    PermissionUpdate,
    RoleCreate,
    RolePermissionsResponse,
    RoleResponse,
    RoleUpdate,
)

# Report schemas
from reportflow.schemas.report import (
    ReportCreate,
    ReportIdRequest,
    ReportResponse,
    ReportUpdate,
    report_values,
)

# Subscription schemas
from reportflow.schemas.subscription import (
    SubscriptionCreate,
    SubscriptionResponse,
    SubscriptionUpdate,
)

# Setting schemas
from reportflow.schemas.setting import (
    SettingCreate,
    SettingResponse,
    SettingUpdate,
)

# Audit schemas
from reportflow.schemas.audit_log import (
    AuditLogResponse,
    DashboardResponse,
)

__all__ = [
    # Common
    "ErrorResponse",
    "SuccessResponse",
    "ValidationErrorDetail",
    "ValidationErrorResponse",
    "model_values",
    # Auth
    "LoginRequest",
    "LoginResponse",
    "LogoutResponse",
    "RegisterRequest",
    # User
    "AccountUnlockResponse",
    "RoleIdRequest",
    "UserIdRequest",
    "UserResponse",
    "UserUpdate",
    # Organization
    "OrganizationCreate",
    "OrganizationResponse",
    "OrganizationUpdate",
    # Role & permission
    "PermissionCreate",
    "PermissionIdsRequest",
    "PermissionResponse",
    "PermissionUpdate",
    "RoleCreate",
    "RolePermissionsResponse",
    "RoleResponse",
    "RoleUpdate",
    # Report
    "ReportCreate",
    "ReportIdRequest",
    "ReportResponse",
    "ReportUpdate",
    "report_values",
    # Subscription
    "SubscriptionCreate",
    "SubscriptionResponse",
    "SubscriptionUpdate",
    # Setting
    "SettingCreate",
    "SettingResponse",
    "SettingUpdate",
    # Audit
    "AuditLogResponse",
    "DashboardResponse",
]
