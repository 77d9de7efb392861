"""
Admin Routes Module
===================

Back-office endpoints for system management.

Features:
- Organization, user, role and permission management
- Role/permission assignment
- Settings and subscriptions
- Audit log browsing and dashboard statistics

Security:
- All endpoints require the admin account type
- All mutations are audit logged
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Request, Query, status
from sqlalchemy.orm import Session

from reportflow.core.dependencies.rbac import require_admin
from reportflow.core.dependencies.repositories import (
    get_audit_log_repository,
    get_organization_repository,
    get_permission_repository,
    get_report_repository,
    get_role_repository,
    get_setting_repository,
    get_subscription_repository,
    get_user_repository,
)
from reportflow.core.enums import AuditAction, EntityType
from reportflow.core.exceptions import BadRequestError, NotFoundError, ResourceExistsError
from reportflow.core.logging import get_logger
from reportflow.db.session import get_db
from reportflow.models.user import User
from reportflow.repositories import (
    AuditLogRepository,
    OrganizationRepository,
    PermissionRepository,
    ReportRepository,
    RoleRepository,
    SettingRepository,
    SubscriptionRepository,
    UserRepository,
)
from reportflow.schemas import (
    AccountUnlockResponse,
    AuditLogResponse,
    DashboardResponse,
    ErrorResponse,
    OrganizationCreate,
    OrganizationResponse,
    OrganizationUpdate,
    PermissionCreate,
    PermissionIdsRequest,
    PermissionResponse,
    PermissionUpdate,
    RoleCreate,
    RolePermissionsResponse,
    RoleResponse,
    RoleUpdate,
    SettingCreate,
    SettingResponse,
    SettingUpdate,
    SubscriptionCreate,
    SubscriptionResponse,
    SubscriptionUpdate,
    SuccessResponse,
    UserResponse,
    UserUpdate,
    model_values,
)
from reportflow.services.audit_service import AuditService, get_client_ip
from reportflow.services.rbac_service import RBACService

# Initialize logger
logger = get_logger(__name__)


# =====================================
# Router Setup
# =====================================

router = APIRouter(
    prefix="/api/admin",
    tags=["Admin"],
    responses={
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Admin privileges required"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
)


def audit(
    db: Session,
    request: Request,
    admin: User,
    action: AuditAction,
    entity_type: EntityType,
    entity_id,
    details: Optional[dict] = None,
) -> None:
    """Record an admin mutation."""
    AuditService(db).log_user_action(
        admin.id,
        action,
        entity_type,
        entity_id,
        details,
        get_client_ip(request),
        admin.organization_id,
    )


# =====================================
# Dashboard Endpoint
# =====================================

@router.get(
    "/dashboard",
    response_model=DashboardResponse,
    summary="Admin Dashboard",
    description="System statistics and the latest audit activity.",
)
def admin_dashboard(
    request: Request,
    current_user: User = Depends(require_admin),
    users: UserRepository = Depends(get_user_repository),
    organizations: OrganizationRepository = Depends(get_organization_repository),
    roles: RoleRepository = Depends(get_role_repository),
    permissions: PermissionRepository = Depends(get_permission_repository),
    reports: ReportRepository = Depends(get_report_repository),
    subscriptions: SubscriptionRepository = Depends(get_subscription_repository),
    audit_logs: AuditLogRepository = Depends(get_audit_log_repository),
) -> dict:
    logger.info(
        "Admin dashboard accessed",
        extra={
            "user_id": str(current_user.id),
            "ip_address": get_client_ip(request),
        }
    )

    return {
        "users": users.count(),
        "active_users": users.count_active(),
        "locked_users": users.count_locked(),
        "organizations": organizations.count(),
        "roles": roles.count(),
        "permissions": permissions.count(),
        "reports": reports.count(),
        "subscriptions_by_plan": subscriptions.count_by_plan(),
        "recent_activity": audit_logs.find_all(limit=10),
    }


# =====================================
# Organization Management Endpoints
# =====================================

@router.get(
    "/organizations",
    response_model=List[OrganizationResponse],
    summary="List Organizations",
)
def list_organizations(
    limit: Optional[int] = Query(default=None, ge=1, le=500),
    offset: Optional[int] = Query(default=None, ge=0),
    current_user: User = Depends(require_admin),
    organizations: OrganizationRepository = Depends(get_organization_repository),
):
    return organizations.find_all(limit=limit, offset=offset)


@router.post(
    "/organizations",
    response_model=OrganizationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Organization",
    responses={409: {"model": ErrorResponse, "description": "Name already in use"}},
)
def create_organization(
    request: Request,
    payload: OrganizationCreate,
    current_user: User = Depends(require_admin),
    organizations: OrganizationRepository = Depends(get_organization_repository),
    db: Session = Depends(get_db),
):
    if organizations.find_by_name(payload.name):
        raise ResourceExistsError("Organization", "name", payload.name)

    organization = organizations.create(model_values(payload))
    audit(db, request, current_user, AuditAction.CREATE, EntityType.ORGANIZATION,
          organization.id, {"name": organization.name})
    return organization


@router.get(
    "/organizations/{organization_id}",
    response_model=OrganizationResponse,
    summary="Get Organization",
    responses={404: {"model": ErrorResponse, "description": "Organization not found"}},
)
def get_organization(
    organization_id: UUID,
    current_user: User = Depends(require_admin),
    organizations: OrganizationRepository = Depends(get_organization_repository),
):
    organization = organizations.find_by_id(organization_id)
    if organization is None:
        raise NotFoundError("Organization", organization_id)
    return organization


@router.put(
    "/organizations/{organization_id}",
    response_model=OrganizationResponse,
    summary="Update Organization",
    responses={
        404: {"model": ErrorResponse, "description": "Organization not found"},
        409: {"model": ErrorResponse, "description": "Name already in use"},
    },
)
def update_organization(
    request: Request,
    organization_id: UUID,
    payload: OrganizationUpdate,
    current_user: User = Depends(require_admin),
    organizations: OrganizationRepository = Depends(get_organization_repository),
    db: Session = Depends(get_db),
):
    if organizations.find_by_id(organization_id) is None:
        raise NotFoundError("Organization", organization_id)

    data = model_values(payload, exclude_unset=True)
    if data.get("name"):
        existing = organizations.find_by_name(data["name"])
        if existing and existing.id != organization_id:
            raise ResourceExistsError("Organization", "name", data["name"])

    organization = organizations.update(organization_id, data)
    audit(db, request, current_user, AuditAction.UPDATE, EntityType.ORGANIZATION,
          organization_id, {"fields": sorted(data)})
    return organization


@router.delete(
    "/organizations/{organization_id}",
    response_model=SuccessResponse,
    summary="Delete Organization",
    responses={404: {"model": ErrorResponse, "description": "Organization not found"}},
)
def delete_organization(
    request: Request,
    organization_id: UUID,
    current_user: User = Depends(require_admin),
    organizations: OrganizationRepository = Depends(get_organization_repository),
    db: Session = Depends(get_db),
):
    if not organizations.delete(organization_id):
        raise NotFoundError("Organization", organization_id)
    audit(db, request, current_user, AuditAction.DELETE, EntityType.ORGANIZATION, organization_id)
    return {"success": True}


# =====================================
# Permission Management Endpoints
# =====================================

@router.get(
    "/permissions",
    response_model=List[PermissionResponse],
    summary="List Permissions",
)
def list_permissions(
    resource: Optional[str] = Query(default=None, description="Filter by resource"),
    current_user: User = Depends(require_admin),
    permissions: PermissionRepository = Depends(get_permission_repository),
):
    if resource:
        return permissions.find_by_resource(resource)
    return permissions.find_all()


@router.post(
    "/permissions",
    response_model=PermissionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Permission",
    responses={409: {"model": ErrorResponse, "description": "Name already in use"}},
)
def create_permission(
    request: Request,
    payload: PermissionCreate,
    current_user: User = Depends(require_admin),
    permissions: PermissionRepository = Depends(get_permission_repository),
    db: Session = Depends(get_db),
):
    if permissions.find_by_name(payload.name):
        raise ResourceExistsError("Permission", "name", payload.name)

    permission = permissions.create(model_values(payload))
    audit(db, request, current_user, AuditAction.CREATE, EntityType.PERMISSION,
          permission.id, {"name": permission.name})
    return permission


@router.get(
    "/permissions/{permission_id}",
    response_model=PermissionResponse,
    summary="Get Permission",
    responses={404: {"model": ErrorResponse, "description": "Permission not found"}},
)
def get_permission(
    permission_id: UUID,
    current_user: User = Depends(require_admin),
    permissions: PermissionRepository = Depends(get_permission_repository),
):
    permission = permissions.find_by_id(permission_id)
    if permission is None:
        raise NotFoundError("Permission", permission_id)
    return permission


@router.put(
    "/permissions/{permission_id}",
    response_model=PermissionResponse,
    summary="Update Permission",
)
def update_permission(
    request: Request,
    permission_id: UUID,
    payload: PermissionUpdate,
    current_user: User = Depends(require_admin),
    permissions: PermissionRepository = Depends(get_permission_repository),
    db: Session = Depends(get_db),
):
    if permissions.find_by_id(permission_id) is None:
        raise NotFoundError("Permission", permission_id)

    data = model_values(payload, exclude_unset=True)
    if data.get("name"):
        existing = permissions.find_by_name(data["name"])
        if existing and existing.id != permission_id:
            raise ResourceExistsError("Permission", "name", data["name"])

    permission = permissions.update(permission_id, data)
    audit(db, request, current_user, AuditAction.UPDATE, EntityType.PERMISSION,
          permission_id, {"fields": sorted(data)})
    return permission


@router.delete(
    "/permissions/{permission_id}",
    response_model=SuccessResponse,
    summary="Delete Permission",
)
def delete_permission(
    request: Request,
    permission_id: UUID,
    current_user: User = Depends(require_admin),
    permissions: PermissionRepository = Depends(get_permission_repository),
    db: Session = Depends(get_db),
):
    if not permissions.delete(permission_id):
        raise NotFoundError("Permission", permission_id)
    audit(db, request, current_user, AuditAction.DELETE, EntityType.PERMISSION, permission_id)
    return {"success": True}


# =====================================
# Role Management Endpoints
# =====================================

@router.get(
    "/roles",
    response_model=List[RoleResponse],
    summary="List Roles",
)
def list_roles(
    current_user: User = Depends(require_admin),
    roles: RoleRepository = Depends(get_role_repository),
):
    return roles.find_all()


@router.post(
    "/roles",
    response_model=RoleResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Role",
    responses={409: {"model": ErrorResponse, "description": "Name already in use"}},
)
def create_role(
    request: Request,
    payload: RoleCreate,
    current_user: User = Depends(require_admin),
    roles: RoleRepository = Depends(get_role_repository),
    db: Session = Depends(get_db),
):
    if roles.find_by_name(payload.name):
        raise ResourceExistsError("Role", "name", payload.name)

    role = roles.create(model_values(payload))
    audit(db, request, current_user, AuditAction.CREATE, EntityType.ROLE, role.id, {"name": role.name})
    return role


@router.get(
    "/roles/{role_id}",
    response_model=RoleResponse,
    summary="Get Role",
    responses={404: {"model": ErrorResponse, "description": "Role not found"}},
)
def get_role(
    role_id: UUID,
    current_user: User = Depends(require_admin),
    roles: RoleRepository = Depends(get_role_repository),
):
    role = roles.find_by_id(role_id)
    if role is None:
        raise NotFoundError("Role", role_id)
    return role


@router.put(
    "/roles/{role_id}",
    response_model=RoleResponse,
    summary="Update Role",
)
def update_role(
    request: Request,
    role_id: UUID,
    payload: RoleUpdate,
    current_user: User = Depends(require_admin),
    roles: RoleRepository = Depends(get_role_repository),
    db: Session = Depends(get_db),
):
    if roles.find_by_id(role_id) is None:
        raise NotFoundError("Role", role_id)

    data = model_values(payload, exclude_unset=True)
    if data.get("name"):
        existing = roles.find_by_name(data["name"])
        if existing and existing.id != role_id:
            raise ResourceExistsError("Role", "name", data["name"])

    role = roles.update(role_id, data)
    audit(db, request, current_user, AuditAction.UPDATE, EntityType.ROLE, role_id, {"fields": sorted(data)})
    return role


@router.delete(
    "/roles/{role_id}",
    response_model=SuccessResponse,
    summary="Delete Role",
)
def delete_role(
    request: Request,
    role_id: UUID,
    current_user: User = Depends(require_admin),
    roles: RoleRepository = Depends(get_role_repository),
    db: Session = Depends(get_db),
):
    if not roles.delete(role_id):
        raise NotFoundError("Role", role_id)
    audit(db, request, current_user, AuditAction.DELETE, EntityType.ROLE, role_id)
    return {"success": True}


# =====================================
# Role Permission Assignment Endpoints
# =====================================

@router.get(
    "/roles/{role_id}/permissions",
    response_model=List[PermissionResponse],
    summary="List Role Permissions",
)
def list_role_permissions(
    role_id: UUID,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return RBACService(db).get_role_permissions(role_id)


@router.post(
    "/roles/{role_id}/permissions",
    response_model=RolePermissionsResponse,
    summary="Assign Permissions",
    description="Grant permissions to a role. Already granted permissions are left untouched.",
    responses={404: {"model": ErrorResponse, "description": "Role or permission not found"}},
)
def assign_role_permissions(
    request: Request,
    role_id: UUID,
    payload: PermissionIdsRequest,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    role = RBACService(db).assign_permissions(role_id, payload.permission_ids)
    audit(db, request, current_user, AuditAction.UPDATE, EntityType.ROLE, role_id,
          {"assigned_permission_ids": [str(pid) for pid in payload.permission_ids]})
    return {"success": True, "permission_ids": role.permission_ids}


@router.delete(
    "/roles/{role_id}/permissions",
    response_model=RolePermissionsResponse,
    summary="Remove Permissions",
    responses={404: {"model": ErrorResponse, "description": "Role not found"}},
)
def remove_role_permissions(
    request: Request,
    role_id: UUID,
    payload: PermissionIdsRequest,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    role = RBACService(db).remove_permissions(role_id, payload.permission_ids)
    audit(db, request, current_user, AuditAction.UPDATE, EntityType.ROLE, role_id,
          {"removed_permission_ids": [str(pid) for pid in payload.permission_ids]})
    return {"success": True, "permission_ids": role.permission_ids}


# =====================================
# User Management Endpoints
# =====================================

@router.get(
    "/users",
    response_model=List[UserResponse],
    summary="List Users",
)
def list_users(
    role: Optional[str] = Query(default=None, description="Filter by account type"),
    is_active: Optional[bool] = Query(default=None, description="Filter by active status"),
    organization_id: Optional[UUID] = Query(default=None, description="Filter by organization"),
    limit: Optional[int] = Query(default=None, ge=1, le=500),
    offset: Optional[int] = Query(default=None, ge=0),
    current_user: User = Depends(require_admin),
    users: UserRepository = Depends(get_user_repository),
):
    return users.search(
        role=role,
        is_active=is_active,
        organization_id=organization_id,
        limit=limit,
        offset=offset,
    )


@router.get(
    "/users/{user_id}",
    response_model=UserResponse,
    summary="Get User",
    responses={404: {"model": ErrorResponse, "description": "User not found"}},
)
def get_user(
    user_id: UUID,
    current_user: User = Depends(require_admin),
    users: UserRepository = Depends(get_user_repository),
):
    user = users.find_by_id(user_id)
    if user is None:
        raise NotFoundError("User", user_id)
    return user


@router.put(
    "/users/{user_id}",
    response_model=UserResponse,
    summary="Update User",
    responses={
        404: {"model": ErrorResponse, "description": "User, role or organization not found"},
        409: {"model": ErrorResponse, "description": "Email already in use"},
    },
)
def update_user(
    request: Request,
    user_id: UUID,
    payload: UserUpdate,
    current_user: User = Depends(require_admin),
    users: UserRepository = Depends(get_user_repository),
    roles: RoleRepository = Depends(get_role_repository),
    organizations: OrganizationRepository = Depends(get_organization_repository),
    db: Session = Depends(get_db),
):
    if users.find_by_id(user_id) is None:
        raise NotFoundError("User", user_id)

    data = model_values(payload, exclude_unset=True)
    if data.get("email"):
        existing = users.find_by_email(data["email"])
        if existing and existing.id != user_id:
            raise ResourceExistsError("User", "email", data["email"])
    if data.get("role_id") and roles.find_by_id(data["role_id"]) is None:
        raise NotFoundError("Role", data["role_id"])
    if data.get("organization_id") and organizations.find_by_id(data["organization_id"]) is None:
        raise NotFoundError("Organization", data["organization_id"])

    user = users.update(user_id, data)
    audit(db, request, current_user, AuditAction.UPDATE, EntityType.USER, user_id, {"fields": sorted(data)})
    return user


@router.delete(
    "/users/{user_id}",
    response_model=SuccessResponse,
    summary="Delete User",
    responses={
        400: {"model": ErrorResponse, "description": "Cannot delete own account"},
        404: {"model": ErrorResponse, "description": "User not found"},
    },
)
def delete_user(
    request: Request,
    user_id: UUID,
    current_user: User = Depends(require_admin),
    users: UserRepository = Depends(get_user_repository),
    db: Session = Depends(get_db),
):
    if user_id == current_user.id:
        raise BadRequestError("You cannot delete your own account")
    if not users.delete(user_id):
        raise NotFoundError("User", user_id)
    audit(db, request, current_user, AuditAction.DELETE, EntityType.USER, user_id)
    return {"success": True}


@router.post(
    "/users/{user_id}/unlock",
    response_model=AccountUnlockResponse,
    summary="Unlock User Account",
    description="Unlock an account locked after repeated failed logins.",
)
def unlock_user(
    request: Request,
    user_id: UUID,
    current_user: User = Depends(require_admin),
    users: UserRepository = Depends(get_user_repository),
    db: Session = Depends(get_db),
):
    user = users.find_by_id(user_id)
    if user is None:
        raise NotFoundError("User", user_id)

    user.unlock_account()
    db.commit()
    audit(db, request, current_user, AuditAction.UPDATE, EntityType.USER, user_id, {"unlocked": True})

    logger.info(
        "User account unlocked",
        extra={"user_id": str(user_id), "unlocked_by": str(current_user.id)}
    )
    return {"success": True, "user_id": user.id, "is_locked": user.is_locked}


# =====================================
# Setting Management Endpoints
# =====================================

@router.get(
    "/settings",
    response_model=List[SettingResponse],
    summary="List Settings",
)
def list_settings(
    current_user: User = Depends(require_admin),
    settings_repo: SettingRepository = Depends(get_setting_repository),
):
    return settings_repo.find_all()


@router.post(
    "/settings",
    response_model=SettingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Setting",
    responses={409: {"model": ErrorResponse, "description": "Key already in use"}},
)
def create_setting(
    request: Request,
    payload: SettingCreate,
    current_user: User = Depends(require_admin),
    settings_repo: SettingRepository = Depends(get_setting_repository),
    db: Session = Depends(get_db),
):
    if settings_repo.find_by_key(payload.key):
        raise ResourceExistsError("Setting", "key", payload.key)

    setting = settings_repo.create(model_values(payload))
    audit(db, request, current_user, AuditAction.CREATE, EntityType.SETTING, setting.id, {"key": setting.key})
    return setting


@router.get(
    "/settings/{setting_id}",
    response_model=SettingResponse,
    summary="Get Setting",
)
def get_setting(
    setting_id: UUID,
    current_user: User = Depends(require_admin),
    settings_repo: SettingRepository = Depends(get_setting_repository),
):
    setting = settings_repo.find_by_id(setting_id)
    if setting is None:
        raise NotFoundError("Setting", setting_id)
    return setting


@router.put(
    "/settings/{setting_id}",
    response_model=SettingResponse,
    summary="Update Setting",
)
def update_setting(
    request: Request,
    setting_id: UUID,
    payload: SettingUpdate,
    current_user: User = Depends(require_admin),
    settings_repo: SettingRepository = Depends(get_setting_repository),
    db: Session = Depends(get_db),
):
    if settings_repo.find_by_id(setting_id) is None:
        raise NotFoundError("Setting", setting_id)

    data = model_values(payload, exclude_unset=True)
    if data.get("key"):
        existing = settings_repo.find_by_key(data["key"])
        if existing and existing.id != setting_id:
            raise ResourceExistsError("Setting", "key", data["key"])

    setting = settings_repo.update(setting_id, data)
    audit(db, request, current_user, AuditAction.UPDATE, EntityType.SETTING, setting_id, {"fields": sorted(data)})
    return setting


@router.delete(
    "/settings/{setting_id}",
    response_model=SuccessResponse,
    summary="Delete Setting",
)
def delete_setting(
    request: Request,
    setting_id: UUID,
    current_user: User = Depends(require_admin),
    settings_repo: SettingRepository = Depends(get_setting_repository),
    db: Session = Depends(get_db),
):
    if not settings_repo.delete(setting_id):
        raise NotFoundError("Setting", setting_id)
    audit(db, request, current_user, AuditAction.DELETE, EntityType.SETTING, setting_id)
    return {"success": True}


# =====================================
# Subscription Management Endpoints
# =====================================

@router.get(
    "/subscriptions",
    response_model=List[SubscriptionResponse],
    summary="List Subscriptions",
)
def list_subscriptions(
    user_id: Optional[UUID] = Query(default=None, description="Filter by user"),
    current_user: User = Depends(require_admin),
    subscriptions: SubscriptionRepository = Depends(get_subscription_repository),
):
    if user_id is not None:
        return subscriptions.find_by_user_id(user_id)
    return subscriptions.find_all()


@router.post(
    "/subscriptions",
    response_model=SubscriptionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Subscription",
    responses={404: {"model": ErrorResponse, "description": "User not found"}},
)
def create_subscription(
    request: Request,
    payload: SubscriptionCreate,
    current_user: User = Depends(require_admin),
    subscriptions: SubscriptionRepository = Depends(get_subscription_repository),
    users: UserRepository = Depends(get_user_repository),
    db: Session = Depends(get_db),
):
    if users.find_by_id(payload.user_id) is None:
        raise NotFoundError("User", payload.user_id)

    data = model_values(payload)
    if data.get("start_date") is None:
        data.pop("start_date", None)

    subscription = subscriptions.create(data)
    audit(db, request, current_user, AuditAction.CREATE, EntityType.SUBSCRIPTION, subscription.id,
          {"user_id": str(subscription.user_id), "plan": subscription.plan})
    return subscription


@router.get(
    "/subscriptions/{subscription_id}",
    response_model=SubscriptionResponse,
    summary="Get Subscription",
)
def get_subscription(
    subscription_id: UUID,
    current_user: User = Depends(require_admin),
    subscriptions: SubscriptionRepository = Depends(get_subscription_repository),
):
    subscription = subscriptions.find_by_id(subscription_id)
    if subscription is None:
        raise NotFoundError("Subscription", subscription_id)
    return subscription


@router.put(
    "/subscriptions/{subscription_id}",
    response_model=SubscriptionResponse,
    summary="Update Subscription",
)
def update_subscription(
    request: Request,
    subscription_id: UUID,
    payload: SubscriptionUpdate,
    current_user: User = Depends(require_admin),
    subscriptions: SubscriptionRepository = Depends(get_subscription_repository),
    db: Session = Depends(get_db),
):
    data = model_values(payload, exclude_unset=True)
    subscription = subscriptions.update(subscription_id, data)
    if subscription is None:
        raise NotFoundError("Subscription", subscription_id)
    audit(db, request, current_user, AuditAction.UPDATE, EntityType.SUBSCRIPTION, subscription_id,
          {"fields": sorted(data)})
    return subscription


@router.delete(
    "/subscriptions/{subscription_id}",
    response_model=SuccessResponse,
    summary="Delete Subscription",
)
def delete_subscription(
    request: Request,
    subscription_id: UUID,
    current_user: User = Depends(require_admin),
    subscriptions: SubscriptionRepository = Depends(get_subscription_repository),
    db: Session = Depends(get_db),
):
    if not subscriptions.delete(subscription_id):
        raise NotFoundError("Subscription", subscription_id)
    audit(db, request, current_user, AuditAction.DELETE, EntityType.SUBSCRIPTION, subscription_id)
    return {"success": True}


# =====================================
# Audit Log Endpoints
# =====================================

@router.get(
    "/audit-logs",
    response_model=List[AuditLogResponse],
    summary="List Audit Logs",
    description="Newest first. Filter by acting user or affected entity.",
)
def list_audit_logs(
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    user_id: Optional[UUID] = Query(default=None),
    entity_id: Optional[str] = Query(default=None),
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    audit_service = AuditService(db)
    if user_id is not None:
        logs = audit_service.get_user_activity_logs(user_id)
    elif entity_id is not None:
        logs = audit_service.get_entity_logs(entity_id)
    else:
        return audit_service.list_logs(limit=limit, offset=offset)
    return logs[offset:offset + limit]


@router.get(
    "/audit-logs/{log_id}",
    response_model=AuditLogResponse,
    summary="Get Audit Log",
)
def get_audit_log(
    log_id: UUID,
    current_user: User = Depends(require_admin),
    audit_logs: AuditLogRepository = Depends(get_audit_log_repository),
):
    entry = audit_logs.find_by_id(log_id)
    if entry is None:
        raise NotFoundError("AuditLog", log_id)
    return entry
