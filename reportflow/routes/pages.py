"""
Page Routes Module
==================

Server-rendered HTML pages:
- Marketing landing page
- Login and registration forms (they post to /api/auth)
- Tenant dashboard and account page
- Admin overview and management pages (they drive /api/admin)

Cookie presence is checked by SessionRedirectMiddleware; these handlers
validate the session itself and fall back to /login when it is stale.
"""

from pathlib import Path
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from jinja2 import Environment, FileSystemLoader, select_autoescape
from sqlalchemy.orm import Session

from reportflow.core.config import settings
from reportflow.core.dependencies.auth import get_current_user_optional
from reportflow.core.enums import (
    PermissionAction,
    SubscriptionPlan,
    SubscriptionStatus,
    UserRole,
)
from reportflow.core.exceptions import NotFoundError
from reportflow.db.session import get_db
from reportflow.models.user import User
from reportflow.repositories import get_repository_factory


TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

env = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=select_autoescape(["html", "xml"]),
)

router = APIRouter(tags=["Pages"], include_in_schema=False)

PLANS = [
    {"name": SubscriptionPlan.FREE.value, "title": "Free", "summary": "Personal reports for one user"},
    {"name": SubscriptionPlan.BASIC.value, "title": "Basic", "summary": "Shared reports for a small team"},
    {"name": SubscriptionPlan.PREMIUM.value, "title": "Premium", "summary": "Unlimited reports, roles and audit history"},
]


def render(template_name: str, **context) -> HTMLResponse:
    template = env.get_template(template_name)
    context.setdefault("app_name", settings.APP_NAME)
    return HTMLResponse(template.render(**context))


def public_settings(db: Session) -> dict:
    return {
        setting.key: setting.value
        for setting in get_repository_factory().settings(db).find_public()
    }


def safe_next(target: Optional[str], default: str = "/dashboard") -> str:
    """Return ``target`` only when it is a same-site path."""
    if not target or not target.startswith("/") or target.startswith("//") or "\\" in target:
        return default
    return target


def login_redirect(request: Request) -> RedirectResponse:
    response = RedirectResponse(url=f"/login?from={request.url.path}", status_code=303)
    response.delete_cookie(settings.SESSION_COOKIE_NAME, path="/")
    return response


def admin_redirect(request: Request, user: Optional[User]) -> Optional[RedirectResponse]:
    """Where to send a visitor who may not use the back-office, or None."""
    if user is None:
        return login_redirect(request)
    if not user.is_admin:
        return RedirectResponse(url="/dashboard", status_code=303)
    return None


# =====================================
# Marketing
# =====================================

@router.get("/", response_class=HTMLResponse)
def landing_page(
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db),
):
    return render(
        "index.html",
        site=public_settings(db),
        plans=PLANS,
        user=current_user,
    )


# =====================================
# Auth Forms
# =====================================

@router.get("/login", response_class=HTMLResponse)
def login_page(request: Request):
    return render("login.html", next_url=safe_next(request.query_params.get("from")))


@router.get("/register", response_class=HTMLResponse)
def register_page():
    return render("register.html")


# =====================================
# Tenant Dashboard
# =====================================

@router.get("/dashboard", response_class=HTMLResponse)
def dashboard_page(
    request: Request,
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db),
):
    if current_user is None:
        return login_redirect(request)

    reports = get_repository_factory().reports(db)
    own_reports = reports.find_by_creator(current_user.id)
    organization_reports = []
    if current_user.organization_id:
        organization_reports = [
            report for report in reports.find_by_organization(current_user.organization_id)
            if report.created_by_id != current_user.id
        ]

    return render(
        "dashboard.html",
        user=current_user,
        organization=current_user.organization,
        own_reports=own_reports,
        organization_reports=organization_reports,
    )


@router.get("/dashboard/account", response_class=HTMLResponse)
def account_page(
    request: Request,
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db),
):
    if current_user is None:
        return login_redirect(request)

    subscriptions = get_repository_factory().subscriptions(db).find_by_user_id(current_user.id)
    return render(
        "account.html",
        user=current_user,
        organization=current_user.organization,
        role=current_user.assigned_role,
        subscriptions=subscriptions,
    )


# =====================================
# Admin Overview
# =====================================

@router.get("/admin", response_class=HTMLResponse)
def admin_page(
    request: Request,
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db),
):
    redirect = admin_redirect(request, current_user)
    if redirect is not None:
        return redirect

    factory = get_repository_factory()
    counts = {
        "Users": factory.users(db).count(),
        "Organizations": factory.organizations(db).count(),
        "Roles": factory.roles(db).count(),
        "Permissions": factory.permissions(db).count(),
        "Reports": factory.reports(db).count(),
    }
    return render(
        "admin.html",
        user=current_user,
        counts=counts,
        recent_activity=factory.audit_logs(db).find_all(limit=10),
    )


# =====================================
# Admin Management
# =====================================

@router.get("/admin/organizations", response_class=HTMLResponse)
def admin_organizations_page(
    request: Request,
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db),
):
    redirect = admin_redirect(request, current_user)
    if redirect is not None:
        return redirect

    return render(
        "admin_organizations.html",
        user=current_user,
        organizations=get_repository_factory().organizations(db).find_all(),
    )


@router.get("/admin/users", response_class=HTMLResponse)
def admin_users_page(
    request: Request,
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db),
):
    redirect = admin_redirect(request, current_user)
    if redirect is not None:
        return redirect

    factory = get_repository_factory()
    return render(
        "admin_users.html",
        user=current_user,
        users=factory.users(db).find_all(),
        roles=factory.roles(db).find_all(),
        organizations=factory.organizations(db).find_all(),
        account_types=[role.value for role in UserRole],
    )


@router.get("/admin/roles", response_class=HTMLResponse)
def admin_roles_page(
    request: Request,
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db),
):
    redirect = admin_redirect(request, current_user)
    if redirect is not None:
        return redirect

    return render(
        "admin_roles.html",
        user=current_user,
        roles=get_repository_factory().roles(db).find_all(),
    )


@router.get("/admin/roles/{role_id}/permissions", response_class=HTMLResponse)
def admin_role_permissions_page(
    request: Request,
    role_id: UUID,
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db),
):
    redirect = admin_redirect(request, current_user)
    if redirect is not None:
        return redirect

    factory = get_repository_factory()
    role = factory.roles(db).find_by_id(role_id)
    if role is None:
        raise NotFoundError("Role", str(role_id))

    return render(
        "admin_role_permissions.html",
        user=current_user,
        role=role,
        granted=set(role.permission_ids),
        permissions=factory.permissions(db).find_all(),
    )


@router.get("/admin/permissions", response_class=HTMLResponse)
def admin_permissions_page(
    request: Request,
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db),
):
    redirect = admin_redirect(request, current_user)
    if redirect is not None:
        return redirect

    return render(
        "admin_permissions.html",
        user=current_user,
        permissions=get_repository_factory().permissions(db).find_all(),
        actions=[action.value for action in PermissionAction],
    )


@router.get("/admin/settings", response_class=HTMLResponse)
def admin_settings_page(
    request: Request,
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db),
):
    redirect = admin_redirect(request, current_user)
    if redirect is not None:
        return redirect

    return render(
        "admin_settings.html",
        user=current_user,
        site_settings=get_repository_factory().settings(db).find_all(),
    )


@router.get("/admin/subscriptions", response_class=HTMLResponse)
def admin_subscriptions_page(
    request: Request,
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db),
):
    redirect = admin_redirect(request, current_user)
    if redirect is not None:
        return redirect

    factory = get_repository_factory()
    users = factory.users(db).find_all()
    return render(
        "admin_subscriptions.html",
        user=current_user,
        subscriptions=factory.subscriptions(db).find_all(),
        users=users,
        emails={account.id: account.email for account in users},
        plans=[plan.value for plan in SubscriptionPlan],
        statuses=[status.value for status in SubscriptionStatus],
    )
