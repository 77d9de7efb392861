"""
Tenant API Routes (v1)
======================

Authenticated endpoints used by the tenant dashboard.

Features:
- Report CRUD with filtering and pagination
- Organization membership and report assignment
- User role, report and subscription sub-resources
- Role and permission catalogue
- Public settings (no authentication)

Security:
- Every endpoint except /settings/public requires a valid session
- Reads and writes are gated by resource:action permissions
- Admin accounts pass every permission check
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Request, Query, status
from sqlalchemy.orm import Session

from reportflow.core.dependencies.rbac import require_permission
from reportflow.core.dependencies.repositories import (
    get_organization_repository,
    get_permission_repository,
    get_report_repository,
    get_role_repository,
    get_setting_repository,
    get_subscription_repository,
    get_user_repository,
)
from reportflow.core.enums import AuditAction, EntityType, ReportType
from reportflow.core.exceptions import (
    BadRequestError,
    ConflictError,
    NotFoundError,
    ResourceExistsError,
)
from reportflow.core.logging import get_logger
from reportflow.db.session import get_db
from reportflow.models import Organization, Report, User
from reportflow.repositories import (
    OrganizationRepository,
    PermissionRepository,
    ReportRepository,
    RoleRepository,
    SettingRepository,
    SubscriptionRepository,
    UserRepository,
)
from reportflow.schemas import (
    ErrorResponse,
    PermissionCreate,
    PermissionResponse,
    ReportCreate,
    ReportIdRequest,
    ReportResponse,
    ReportUpdate,
    RoleCreate,
    RoleIdRequest,
    RoleResponse,
    SettingResponse,
    SubscriptionResponse,
    SuccessResponse,
    UserIdRequest,
    UserResponse,
    model_values,
)
from reportflow.schemas.report import report_values
from reportflow.services.audit_service import AuditService, get_client_ip

# Initialize logger
logger = get_logger(__name__)


# =====================================
# Router Setup
# =====================================

router = APIRouter(
    prefix="/api/v1",
    tags=["API v1"],
    responses={
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Missing permission"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
)


def audit(
    db: Session,
    request: Request,
    user: User,
    action: AuditAction,
    entity_type: EntityType,
    entity_id,
    details: Optional[dict] = None,
) -> None:
    AuditService(db).log_user_action(
        user.id,
        action,
        entity_type,
        entity_id,
        details,
        get_client_ip(request),
        user.organization_id,
    )


def _get_report(reports: ReportRepository, report_id: UUID) -> Report:
    report = reports.find_by_id(report_id)
    if report is None:
        raise NotFoundError("Report", report_id)
    return report


def _get_organization(organizations: OrganizationRepository, organization_id: UUID) -> Organization:
    organization = organizations.find_by_id(organization_id)
    if organization is None:
        raise NotFoundError("Organization", organization_id)
    return organization


def _get_user(users: UserRepository, user_id: UUID) -> User:
    user = users.find_by_id(user_id)
    if user is None:
        raise NotFoundError("User", user_id)
    return user


# =====================================
# Report Endpoints
# =====================================

@router.get(
    "/reports",
    response_model=List[ReportResponse],
    summary="List Reports",
    description="""
    List reports.

    Only one filter is applied, in this order of precedence:
    type, organization_id, created_by_id, is_public.
    """,
)
def list_reports(
    type: Optional[ReportType] = Query(default=None, description="Filter by report type"),
    organization_id: Optional[UUID] = Query(default=None),
    created_by_id: Optional[UUID] = Query(default=None),
    is_public: Optional[bool] = Query(default=None),
    limit: Optional[int] = Query(default=None, ge=1, le=500),
    offset: Optional[int] = Query(default=None, ge=0),
    current_user: User = Depends(require_permission("reports", "read")),
    reports: ReportRepository = Depends(get_report_repository),
):
    if type is not None:
        results = reports.find_by_type(type.value)
    elif organization_id is not None:
        results = reports.find_by_organization(organization_id)
    elif created_by_id is not None:
        results = reports.find_by_creator(created_by_id)
    elif is_public is True:
        results = reports.find_public()
    elif is_public is False:
        results = [report for report in reports.find_all() if not report.is_public]
    else:
        return reports.find_all(limit=limit, offset=offset)

    start = offset or 0
    end = start + limit if limit is not None else None
    return results[start:end]


@router.post(
    "/reports",
    response_model=ReportResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Report",
)
def create_report(
    request: Request,
    payload: ReportCreate,
    current_user: User = Depends(require_permission("reports", "create")),
    reports: ReportRepository = Depends(get_report_repository),
    db: Session = Depends(get_db),
):
    data = report_values(payload)
    if data.get("created_by_id") is None:
        data["created_by_id"] = current_user.id

    report = reports.create(data)
    audit(db, request, current_user, AuditAction.CREATE, EntityType.REPORT, report.id,
          {"name": report.name, "type": report.type})
    return report


@router.get(
    "/reports/{report_id}",
    response_model=ReportResponse,
    summary="Get Report",
    responses={404: {"model": ErrorResponse, "description": "Report not found"}},
)
def get_report(
    report_id: UUID,
    current_user: User = Depends(require_permission("reports", "read")),
    reports: ReportRepository = Depends(get_report_repository),
):
    return _get_report(reports, report_id)


@router.put(
    "/reports/{report_id}",
    response_model=ReportResponse,
    summary="Update Report",
    responses={404: {"model": ErrorResponse, "description": "Report not found"}},
)
def update_report(
    request: Request,
    report_id: UUID,
    payload: ReportUpdate,
    current_user: User = Depends(require_permission("reports", "update")),
    reports: ReportRepository = Depends(get_report_repository),
    db: Session = Depends(get_db),
):
    data = report_values(payload, exclude_unset=True)
    report = reports.update(report_id, data)
    if report is None:
        raise NotFoundError("Report", report_id)
    audit(db, request, current_user, AuditAction.UPDATE, EntityType.REPORT, report_id, {"fields": sorted(data)})
    return report


@router.delete(
    "/reports/{report_id}",
    response_model=SuccessResponse,
    summary="Delete Report",
    responses={404: {"model": ErrorResponse, "description": "Report not found"}},
)
def delete_report(
    request: Request,
    report_id: UUID,
    current_user: User = Depends(require_permission("reports", "delete")),
    reports: ReportRepository = Depends(get_report_repository),
    db: Session = Depends(get_db),
):
    if not reports.delete(report_id):
        raise NotFoundError("Report", report_id)
    audit(db, request, current_user, AuditAction.DELETE, EntityType.REPORT, report_id)
    return {"success": True}


# =====================================
# Organization Report Endpoints
# =====================================

@router.get(
    "/organizations/{organization_id}/reports",
    response_model=List[ReportResponse],
    summary="List Organization Reports",
)
def list_organization_reports(
    organization_id: UUID,
    current_user: User = Depends(require_permission("reports", "read")),
    organizations: OrganizationRepository = Depends(get_organization_repository),
    reports: ReportRepository = Depends(get_report_repository),
):
    _get_organization(organizations, organization_id)
    return reports.find_by_organization(organization_id)


@router.post(
    "/organizations/{organization_id}/reports",
    response_model=ReportResponse,
    summary="Assign Report to Organization",
)
def assign_organization_report(
    request: Request,
    organization_id: UUID,
    payload: ReportIdRequest,
    current_user: User = Depends(require_permission("organizations", "update")),
    organizations: OrganizationRepository = Depends(get_organization_repository),
    reports: ReportRepository = Depends(get_report_repository),
    db: Session = Depends(get_db),
):
    _get_organization(organizations, organization_id)
    _get_report(reports, payload.report_id)

    report = reports.update(payload.report_id, {"organization_id": organization_id})
    audit(db, request, current_user, AuditAction.UPDATE, EntityType.REPORT, report.id,
          {"organization_id": str(organization_id)})
    return report


@router.delete(
    "/organizations/{organization_id}/reports/{report_id}",
    response_model=SuccessResponse,
    summary="Remove Report from Organization",
    responses={400: {"model": ErrorResponse, "description": "Report not assigned to this organization"}},
)
def remove_organization_report(
    request: Request,
    organization_id: UUID,
    report_id: UUID,
    current_user: User = Depends(require_permission("organizations", "update")),
    organizations: OrganizationRepository = Depends(get_organization_repository),
    reports: ReportRepository = Depends(get_report_repository),
    db: Session = Depends(get_db),
):
    _get_organization(organizations, organization_id)
    report = _get_report(reports, report_id)
    if report.organization_id != organization_id:
        raise BadRequestError(f"Report with ID '{report_id}' is not assigned to this organization")

    reports.update(report_id, {"organization_id": None})
    audit(db, request, current_user, AuditAction.UPDATE, EntityType.REPORT, report_id,
          {"organization_id": None})
    return {"success": True}


# =====================================
# Organization Membership Endpoints
# =====================================

@router.get(
    "/organizations/{organization_id}/users",
    response_model=List[UserResponse],
    summary="List Organization Users",
)
def list_organization_users(
    organization_id: UUID,
    current_user: User = Depends(require_permission("users", "read")),
    organizations: OrganizationRepository = Depends(get_organization_repository),
    users: UserRepository = Depends(get_user_repository),
):
    _get_organization(organizations, organization_id)
    return users.find_by_organization(organization_id)


@router.post(
    "/organizations/{organization_id}/users",
    response_model=UserResponse,
    summary="Add User to Organization",
    responses={409: {"model": ErrorResponse, "description": "User already in organization"}},
)
def add_organization_user(
    request: Request,
    organization_id: UUID,
    payload: UserIdRequest,
    current_user: User = Depends(require_permission("organizations", "update")),
    organizations: OrganizationRepository = Depends(get_organization_repository),
    users: UserRepository = Depends(get_user_repository),
    db: Session = Depends(get_db),
):
    _get_organization(organizations, organization_id)
    user = _get_user(users, payload.user_id)
    if user.organization_id == organization_id:
        raise ConflictError(f"User with ID '{payload.user_id}' is already in this organization")

    user = users.update(payload.user_id, {"organization_id": organization_id})
    audit(db, request, current_user, AuditAction.UPDATE, EntityType.USER, user.id,
          {"organization_id": str(organization_id)})
    return user


@router.delete(
    "/organizations/{organization_id}/users/{user_id}",
    response_model=SuccessResponse,
    summary="Remove User from Organization",
    responses={400: {"model": ErrorResponse, "description": "User not in organization"}},
)
def remove_organization_user(
    request: Request,
    organization_id: UUID,
    user_id: UUID,
    current_user: User = Depends(require_permission("organizations", "update")),
    organizations: OrganizationRepository = Depends(get_organization_repository),
    users: UserRepository = Depends(get_user_repository),
    db: Session = Depends(get_db),
):
    _get_organization(organizations, organization_id)
    user = _get_user(users, user_id)
    if user.organization_id != organization_id:
        raise BadRequestError(f"User with ID '{user_id}' is not in this organization")

    users.update(user_id, {"organization_id": None})
    audit(db, request, current_user, AuditAction.UPDATE, EntityType.USER, user_id, {"organization_id": None})
    return {"success": True}


# =====================================
# User Report Endpoints
# =====================================

@router.get(
    "/users/{user_id}/reports",
    response_model=List[ReportResponse],
    summary="List Reports Created by User",
)
def list_user_reports(
    user_id: UUID,
    current_user: User = Depends(require_permission("users", "read")),
    users: UserRepository = Depends(get_user_repository),
    reports: ReportRepository = Depends(get_report_repository),
):
    _get_user(users, user_id)
    return reports.find_by_creator(user_id)


@router.post(
    "/users/{user_id}/reports",
    response_model=ReportResponse,
    summary="Reassign Report Creator",
)
def assign_user_report(
    request: Request,
    user_id: UUID,
    payload: ReportIdRequest,
    current_user: User = Depends(require_permission("users", "update")),
    users: UserRepository = Depends(get_user_repository),
    reports: ReportRepository = Depends(get_report_repository),
    db: Session = Depends(get_db),
):
    _get_user(users, user_id)
    _get_report(reports, payload.report_id)

    report = reports.update(payload.report_id, {"created_by_id": user_id})
    audit(db, request, current_user, AuditAction.UPDATE, EntityType.REPORT, report.id,
          {"created_by_id": str(user_id)})
    return report


# =====================================
# User Role Endpoints
# =====================================

@router.get(
    "/users/{user_id}/roles",
    response_model=List[RoleResponse],
    summary="List User Roles",
    description="A user holds at most one RBAC role; the list is empty or has one entry.",
)
def list_user_roles(
    user_id: UUID,
    current_user: User = Depends(require_permission("users", "read")),
    users: UserRepository = Depends(get_user_repository),
    roles: RoleRepository = Depends(get_role_repository),
):
    user = _get_user(users, user_id)
    if user.role_id is None:
        return []
    role = roles.find_by_id(user.role_id)
    return [role] if role is not None else []


@router.post(
    "/users/{user_id}/roles",
    response_model=UserResponse,
    summary="Assign Role to User",
)
def assign_user_role(
    request: Request,
    user_id: UUID,
    payload: RoleIdRequest,
    current_user: User = Depends(require_permission("users", "update")),
    users: UserRepository = Depends(get_user_repository),
    roles: RoleRepository = Depends(get_role_repository),
    db: Session = Depends(get_db),
):
    _get_user(users, user_id)
    if roles.find_by_id(payload.role_id) is None:
        raise NotFoundError("Role", payload.role_id)

    user = users.update(user_id, {"role_id": payload.role_id})
    audit(db, request, current_user, AuditAction.UPDATE, EntityType.USER, user_id,
          {"role_id": str(payload.role_id)})
    return user


@router.delete(
    "/users/{user_id}/roles/{role_id}",
    response_model=SuccessResponse,
    summary="Remove Role from User",
    responses={400: {"model": ErrorResponse, "description": "User does not have the role"}},
)
def remove_user_role(
    request: Request,
    user_id: UUID,
    role_id: UUID,
    current_user: User = Depends(require_permission("users", "update")),
    users: UserRepository = Depends(get_user_repository),
    db: Session = Depends(get_db),
):
    user = _get_user(users, user_id)
    if user.role_id != role_id:
        raise BadRequestError(f"User with ID '{user_id}' does not have the role with ID '{role_id}'")

    users.update(user_id, {"role_id": None})
    audit(db, request, current_user, AuditAction.UPDATE, EntityType.USER, user_id, {"role_id": None})
    return {"success": True}


# =====================================
# User Subscription Endpoint
# =====================================

@router.get(
    "/users/{user_id}/subscription",
    response_model=List[SubscriptionResponse],
    summary="List User Subscriptions",
)
def list_user_subscriptions(
    user_id: UUID,
    current_user: User = Depends(require_permission("users", "read")),
    users: UserRepository = Depends(get_user_repository),
    subscriptions: SubscriptionRepository = Depends(get_subscription_repository),
):
    _get_user(users, user_id)
    return subscriptions.find_by_user_id(user_id)


# =====================================
# Role & Permission Catalogue
# =====================================

@router.get(
    "/roles",
    response_model=List[RoleResponse],
    summary="List Roles",
)
def list_roles(
    limit: Optional[int] = Query(default=None, ge=1, le=500),
    offset: Optional[int] = Query(default=None, ge=0),
    current_user: User = Depends(require_permission("roles", "read")),
    roles: RoleRepository = Depends(get_role_repository),
):
    return roles.find_all(limit=limit, offset=offset)


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
    current_user: User = Depends(require_permission("roles", "create")),
    roles: RoleRepository = Depends(get_role_repository),
    db: Session = Depends(get_db),
):
    if roles.find_by_name(payload.name):
        raise ResourceExistsError("Role", "name", payload.name)

    role = roles.create(model_values(payload))
    audit(db, request, current_user, AuditAction.CREATE, EntityType.ROLE, role.id, {"name": role.name})
    return role


@router.get(
    "/permissions",
    response_model=List[PermissionResponse],
    summary="List Permissions",
)
def list_permissions(
    resource: Optional[str] = Query(default=None, description="Filter by resource"),
    limit: Optional[int] = Query(default=None, ge=1, le=500),
    offset: Optional[int] = Query(default=None, ge=0),
    current_user: User = Depends(require_permission("permissions", "read")),
    permissions: PermissionRepository = Depends(get_permission_repository),
):
    if resource:
        start = offset or 0
        end = start + limit if limit is not None else None
        return permissions.find_by_resource(resource)[start:end]
    return permissions.find_all(limit=limit, offset=offset)


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
    current_user: User = Depends(require_permission("permissions", "create")),
    permissions: PermissionRepository = Depends(get_permission_repository),
    db: Session = Depends(get_db),
):
    if permissions.find_by_name(payload.name):
        raise ResourceExistsError("Permission", "name", payload.name)

    permission = permissions.create(model_values(payload))
    audit(db, request, current_user, AuditAction.CREATE, EntityType.PERMISSION, permission.id,
          {"name": permission.name})
    return permission


# =====================================
# Public Settings
# =====================================

@router.get(
    "/settings/public",
    response_model=List[SettingResponse],
    summary="Public Settings",
    description="Settings flagged as public. No authentication required.",
)
def list_public_settings(
    settings_repo: SettingRepository = Depends(get_setting_repository),
):
    return settings_repo.find_public()
