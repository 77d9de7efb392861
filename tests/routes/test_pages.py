"""
Page Routes Integration Tests
=============================

Integration tests for the server-rendered pages:
- Landing page with plans and public settings
- Login and registration forms
- Tenant dashboard and account page
- Admin overview and management pages
"""

import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from reportflow.core.config import settings
from reportflow.models.organization import Organization
from reportflow.models.report import Report
from reportflow.models.role import Role
from reportflow.models.user import User
from reportflow.repositories import get_repository_factory


pytestmark = pytest.mark.integration


class TestPublicPages:
    """Pages reachable without a session."""

    def test_landing_page(self, client: TestClient):
        # Act
        response = client.get("/")

        # Assert
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        for plan in ("free", "basic", "premium"):
            assert f'id="plan-{plan}"' in response.text
        assert "support@reportflow.local" in response.text

    def test_login_page_keeps_return_path(self, client: TestClient):
        response = client.get("/login", params={"from": "/dashboard/account"})

        assert response.status_code == 200
        assert "/dashboard/account" in response.text

    @pytest.mark.parametrize(
        "target",
        [
            "https://evil.example/phish",
            "//evil.example/phish",
            "/\\evil.example",
            "javascript:alert(1)",
        ],
    )
    def test_login_page_ignores_offsite_return_path(self, client: TestClient, target: str):
        # Act
        response = client.get("/login", params={"from": target})

        # Assert
        assert response.status_code == 200
        assert 'data-next="/dashboard"' in response.text
        assert "evil.example" not in response.text

    def test_login_page_defaults_to_dashboard(self, client: TestClient):
        response = client.get("/login")

        assert 'data-next="/dashboard"' in response.text

    def test_register_page(self, client: TestClient):
        response = client.get("/register")

        assert response.status_code == 200
        assert "<form" in response.text


class TestDashboardPages:
    """Pages behind the session cookie."""

    def test_dashboard_lists_own_reports(self, user_client: TestClient, sample_user: User, sample_report: Report):
        # Act
        response = user_client.get("/dashboard")

        # Assert
        assert response.status_code == 200
        assert "Welcome, Test User" in response.text
        assert sample_report.name in response.text
        assert "Test Organization" in response.text

    def test_account_page(self, user_client: TestClient, sample_user: User):
        response = user_client.get("/dashboard/account")

        assert response.status_code == 200
        assert sample_user.email in response.text

    def test_stale_cookie_goes_to_login(self, client_for):
        # Arrange
        stale = client_for()
        stale.cookies.set(settings.SESSION_COOKIE_NAME, "expired-or-forged")

        # Act
        response = stale.get("/dashboard")

        # Assert
        assert response.status_code == 303
        assert response.headers["location"] == "/login?from=/dashboard"


class TestAdminPage:
    """The admin overview page."""

    def test_admin_page_counts(self, admin_client: TestClient):
        # Act
        response = admin_client.get("/admin")

        # Assert
        assert response.status_code == 200
        assert 'data-count="roles">3<' in response.text
        assert 'data-count="permissions">9<' in response.text

    def test_non_admin_sent_to_dashboard(self, user_client: TestClient):
        response = user_client.get("/admin")

        assert response.status_code == 303
        assert response.headers["location"] == "/dashboard"


ADMIN_PAGES = [
    "/admin/organizations",
    "/admin/users",
    "/admin/roles",
    "/admin/permissions",
    "/admin/settings",
    "/admin/subscriptions",
]


class TestAdminManagementPages:
    """Back-office pages listing records and posting to /api/admin."""

    @pytest.mark.parametrize("path", ADMIN_PAGES)
    def test_non_admin_sent_to_dashboard(self, user_client: TestClient, path: str):
        # Act
        response = user_client.get(path)

        # Assert
        assert response.status_code == 303
        assert response.headers["location"] == "/dashboard"

    @pytest.mark.parametrize("path", ADMIN_PAGES)
    def test_anonymous_sent_to_login(self, client_for, path: str):
        response = client_for().get(path)

        assert response.status_code == 307
        assert response.headers["location"] == f"/login?from={path}"

    def test_organizations_page(self, admin_client: TestClient, second_organization: Organization):
        # Act
        response = admin_client.get("/admin/organizations")

        # Assert
        assert response.status_code == 200
        assert "Test Organization" in response.text
        assert second_organization.name in response.text
        assert 'data-api="/api/admin/organizations"' in response.text
        assert f'data-api="/api/admin/organizations/{second_organization.id}" data-method="DELETE"' in response.text

    def test_users_page(self, admin_client: TestClient, sample_user: User, sample_admin: User):
        # Act
        response = admin_client.get("/admin/users")

        # Assert
        assert response.status_code == 200
        assert sample_user.email in response.text
        assert f'data-api="/api/admin/users/{sample_user.id}" data-method="PUT"' in response.text
        assert f'data-api="/api/admin/users/{sample_user.id}" data-method="DELETE"' in response.text
        assert f'data-api="/api/admin/users/{sample_admin.id}" data-method="DELETE"' not in response.text

    def test_users_page_offers_unlock(self, admin_client: TestClient, sample_locked_user: User):
        response = admin_client.get("/admin/users")

        assert f'data-api="/api/admin/users/{sample_locked_user.id}/unlock"' in response.text

    def test_roles_page(self, admin_client: TestClient, manager_role: Role):
        # Act
        response = admin_client.get("/admin/roles")

        # Assert
        assert response.status_code == 200
        assert "Manager" in response.text
        assert f'href="/admin/roles/{manager_role.id}/permissions"' in response.text
        assert 'data-api="/api/admin/roles"' in response.text

    def test_role_permissions_page(self, admin_client: TestClient, manager_role: Role):
        # Act
        response = admin_client.get(f"/admin/roles/{manager_role.id}/permissions")

        # Assert
        assert response.status_code == 200
        for name in ("reports:read", "users:read", "users:manage"):
            assert f'data-granted="{name}"' in response.text
        assert 'data-granted="reports:manage"' not in response.text
        assert f'data-api="/api/admin/roles/{manager_role.id}/permissions" data-method="DELETE"' in response.text

    def test_role_permissions_unknown_role(self, admin_client: TestClient):
        response = admin_client.get(f"/admin/roles/{uuid.uuid4()}/permissions")

        assert response.status_code == 404

    def test_permissions_page(self, admin_client: TestClient):
        response = admin_client.get("/admin/permissions")

        assert response.status_code == 200
        assert "reports:read" in response.text
        assert '<option value="manage">' in response.text

    def test_settings_page(self, admin_client: TestClient):
        response = admin_client.get("/admin/settings")

        assert response.status_code == 200
        assert 'id="setting-site_name"' in response.text
        assert 'data-api="/api/admin/settings"' in response.text

    def test_subscriptions_page(self, admin_client: TestClient, db_session: Session, sample_user: User):
        # Arrange
        subscription = get_repository_factory().subscriptions(db_session).create({
            "user_id": sample_user.id,
            "plan": "premium",
            "status": "active",
        })

        # Act
        response = admin_client.get("/admin/subscriptions")

        # Assert
        assert response.status_code == 200
        assert f'id="subscription-{subscription.id}"' in response.text
        assert sample_user.email in response.text
        assert "premium" in response.text

    def test_overview_links_to_management_pages(self, admin_client: TestClient):
        response = admin_client.get("/admin")

        for path in ADMIN_PAGES:
            assert f'href="{path}"' in response.text
