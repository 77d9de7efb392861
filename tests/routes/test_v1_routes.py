"""
V1 API Integration Tests
========================

Integration tests for /api/v1:
- Reports CRUD and filters
- Organization reports and membership
- User reports, roles and subscriptions
- Roles and permissions listing
- Public settings
"""

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from reportflow.models.organization import Organization
from reportflow.models.report import Report
from reportflow.models.role import Role
from reportflow.models.user import User
from reportflow.repositories import get_repository_factory


pytestmark = pytest.mark.integration


class TestReportPermissions:
    """Permission checks on /api/v1/reports."""

    def test_reports_require_session(self, client: TestClient):
        assert client.get("/api/v1/reports").status_code == 401

    def test_user_can_read_reports(self, user_client: TestClient, sample_report: Report):
        # Act
        response = user_client.get("/api/v1/reports")

        # Assert
        assert response.status_code == 200
        assert [r["id"] for r in response.json()] == [str(sample_report.id)]

    def test_user_cannot_create_reports(self, user_client: TestClient):
        # Act
        response = user_client.post("/api/v1/reports", json={"name": "Nope", "type": "usage"})

        # Assert
        assert response.status_code == 403
        assert response.json()["error"] == "Missing permission 'reports:create'"

    def test_roleless_user_cannot_read(self, client_for, roleless_user: User):
        response = client_for(roleless_user).get("/api/v1/reports")

        assert response.status_code == 403

    def test_role_grant_takes_effect(self, client_for, roleless_user: User, db_session: Session, user_role: Role):
        # Arrange
        get_repository_factory().users(db_session).update(roleless_user.id, {"role_id": user_role.id})

        # Act
        response = client_for(roleless_user).get("/api/v1/reports")

        # Assert
        assert response.status_code == 200


class TestReportCrud:
    """CRUD on /api/v1/reports."""

    def test_create_report_defaults_creator(self, admin_client: TestClient, sample_admin: User):
        # Act
        response = admin_client.post(
            "/api/v1/reports",
            json={
                "name": "Signups",
                "type": "usage",
                "config": {"group_by": "week", "metrics": ["signups"]},
                "is_public": True,
            },
        )

        # Assert
        assert response.status_code == 201
        data = response.json()
        assert data["created_by_id"] == str(sample_admin.id)
        assert data["config"] == {"group_by": "week", "metrics": ["signups"]}
        assert data["type"] == "usage"
        assert data["is_public"] is True

    def test_create_report_invalid_type(self, admin_client: TestClient):
        response = admin_client.post("/api/v1/reports", json={"name": "Bad", "type": "weekly"})

        assert response.status_code == 400

    def test_get_report(self, user_client: TestClient, sample_report: Report):
        # Act
        response = user_client.get(f"/api/v1/reports/{sample_report.id}")

        # Assert
        assert response.status_code == 200
        assert response.json()["config"] == {"columns": ["month", "revenue"]}

    def test_get_missing_report(self, user_client: TestClient):
        report_id = uuid4()

        response = user_client.get(f"/api/v1/reports/{report_id}")

        assert response.status_code == 404
        assert response.json() == {"error": f"Report with ID '{report_id}' not found"}

    def test_update_report(self, admin_client: TestClient, sample_report: Report):
        # Act
        response = admin_client.put(
            f"/api/v1/reports/{sample_report.id}",
            json={"name": "Quarterly Revenue", "config": {"period": "quarter"}},
        )

        # Assert
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Quarterly Revenue"
        assert data["config"] == {"period": "quarter"}
        assert data["type"] == "financial"

    @pytest.mark.parametrize("field", ["name", "type", "is_public"])
    def test_update_report_rejects_null(self, admin_client: TestClient, sample_report: Report, field: str):
        # Act
        response = admin_client.put(f"/api/v1/reports/{sample_report.id}", json={field: None})

        # Assert
        assert response.status_code == 400
        assert response.json()["error"] == "Validation error"
        assert admin_client.get(f"/api/v1/reports/{sample_report.id}").json()["name"] == "Monthly Revenue"

    def test_update_report_null_description_clears(self, admin_client: TestClient, sample_report: Report):
        response = admin_client.put(f"/api/v1/reports/{sample_report.id}", json={"description": None})

        assert response.status_code == 200
        assert response.json()["description"] is None

    def test_delete_report(self, admin_client: TestClient, sample_report: Report):
        # Act
        response = admin_client.delete(f"/api/v1/reports/{sample_report.id}")

        # Assert
        assert response.json() == {"success": True}
        assert admin_client.get(f"/api/v1/reports/{sample_report.id}").status_code == 404


class TestReportFilters:
    """Filters on GET /api/v1/reports."""

    def test_filter_by_type(self, user_client: TestClient, sample_report: Report, public_report: Report):
        response = user_client.get("/api/v1/reports", params={"type": "usage"})

        assert [r["id"] for r in response.json()] == [str(public_report.id)]

    def test_filter_by_organization(
        self, user_client: TestClient, sample_report: Report, public_report: Report, sample_organization: Organization
    ):
        response = user_client.get("/api/v1/reports", params={"organization_id": str(sample_organization.id)})

        assert [r["id"] for r in response.json()] == [str(sample_report.id)]

    def test_filter_by_creator(
        self, user_client: TestClient, sample_report: Report, public_report: Report, sample_admin: User
    ):
        response = user_client.get("/api/v1/reports", params={"created_by_id": str(sample_admin.id)})

        assert [r["id"] for r in response.json()] == [str(public_report.id)]

    def test_filter_by_visibility(self, user_client: TestClient, sample_report: Report, public_report: Report):
        public = user_client.get("/api/v1/reports", params={"is_public": "true"})
        private = user_client.get("/api/v1/reports", params={"is_public": "false"})

        assert [r["id"] for r in public.json()] == [str(public_report.id)]
        assert [r["id"] for r in private.json()] == [str(sample_report.id)]

    def test_type_takes_precedence(
        self, user_client: TestClient, sample_report: Report, public_report: Report, sample_organization: Organization
    ):
        # Both filters given: only the type filter is applied
        response = user_client.get(
            "/api/v1/reports",
            params={"type": "usage", "organization_id": str(sample_organization.id)},
        )

        assert [r["id"] for r in response.json()] == [str(public_report.id)]

    def test_pagination(self, user_client: TestClient, sample_report: Report, public_report: Report):
        first = user_client.get("/api/v1/reports", params={"limit": 1})
        rest = user_client.get("/api/v1/reports", params={"limit": 1, "offset": 1})

        assert len(first.json()) == 1
        assert len(rest.json()) == 1
        assert first.json()[0]["id"] != rest.json()[0]["id"]


class TestOrganizationReports:
    """Reports attached to an organization."""

    def test_list_organization_reports(
        self, user_client: TestClient, sample_report: Report, sample_organization: Organization
    ):
        response = user_client.get(f"/api/v1/organizations/{sample_organization.id}/reports")

        assert [r["id"] for r in response.json()] == [str(sample_report.id)]

    def test_list_reports_unknown_organization(self, user_client: TestClient):
        assert user_client.get(f"/api/v1/organizations/{uuid4()}/reports").status_code == 404

    def test_assign_and_remove_report(
        self, admin_client: TestClient, public_report: Report, second_organization: Organization
    ):
        url = f"/api/v1/organizations/{second_organization.id}/reports"

        # Act
        assigned = admin_client.post(url, json={"report_id": str(public_report.id)})
        removed = admin_client.delete(f"{url}/{public_report.id}")
        removed_again = admin_client.delete(f"{url}/{public_report.id}")

        # Assert
        assert assigned.json()["organization_id"] == str(second_organization.id)
        assert removed.json() == {"success": True}
        assert removed_again.status_code == 400
        assert removed_again.json()["error"] == (
            f"Report with ID '{public_report.id}' is not assigned to this organization"
        )

    def test_manager_cannot_assign_reports(
        self, manager_client: TestClient, public_report: Report, sample_organization: Organization
    ):
        response = manager_client.post(
            f"/api/v1/organizations/{sample_organization.id}/reports",
            json={"report_id": str(public_report.id)},
        )

        assert response.status_code == 403


class TestOrganizationUsers:
    """Organization membership."""

    def test_list_members(
        self, user_client: TestClient, sample_user: User, sample_manager: User, sample_organization: Organization
    ):
        response = user_client.get(f"/api/v1/organizations/{sample_organization.id}/users")

        emails = {u["email"] for u in response.json()}
        assert emails == {sample_user.email, sample_manager.email}

    def test_add_and_remove_member(
        self, admin_client: TestClient, roleless_user: User, sample_organization: Organization
    ):
        url = f"/api/v1/organizations/{sample_organization.id}/users"

        # Act
        added = admin_client.post(url, json={"user_id": str(roleless_user.id)})
        added_again = admin_client.post(url, json={"user_id": str(roleless_user.id)})
        removed = admin_client.delete(f"{url}/{roleless_user.id}")
        removed_again = admin_client.delete(f"{url}/{roleless_user.id}")

        # Assert
        assert added.json()["organization_id"] == str(sample_organization.id)
        assert added_again.status_code == 409
        assert added_again.json()["error"] == f"User with ID '{roleless_user.id}' is already in this organization"
        assert removed.json() == {"success": True}
        assert removed_again.status_code == 400

    def test_add_unknown_user(self, admin_client: TestClient, sample_organization: Organization):
        response = admin_client.post(
            f"/api/v1/organizations/{sample_organization.id}/users",
            json={"user_id": str(uuid4())},
        )

        assert response.status_code == 404


class TestUserResources:
    """Reports, roles and subscriptions of a user."""

    def test_list_user_reports(self, user_client: TestClient, sample_user: User, sample_report: Report):
        response = user_client.get(f"/api/v1/users/{sample_user.id}/reports")

        assert [r["id"] for r in response.json()] == [str(sample_report.id)]

    def test_reassign_report_creator(
        self, manager_client: TestClient, sample_manager: User, sample_report: Report
    ):
        # Manager holds users:manage, which covers users:update
        response = manager_client.post(
            f"/api/v1/users/{sample_manager.id}/reports",
            json={"report_id": str(sample_report.id)},
        )

        assert response.status_code == 200
        assert response.json()["created_by_id"] == str(sample_manager.id)

    def test_user_roles(self, user_client: TestClient, sample_user: User, user_role: Role, roleless_user: User):
        assigned = user_client.get(f"/api/v1/users/{sample_user.id}/roles")
        none = user_client.get(f"/api/v1/users/{roleless_user.id}/roles")

        assert [r["name"] for r in assigned.json()] == [user_role.name]
        assert none.json() == []

    def test_assign_and_remove_user_role(
        self, manager_client: TestClient, roleless_user: User, user_role: Role, manager_role: Role
    ):
        url = f"/api/v1/users/{roleless_user.id}/roles"

        # Act
        assigned = manager_client.post(url, json={"role_id": str(user_role.id)})
        wrong_role = manager_client.delete(f"{url}/{manager_role.id}")
        removed = manager_client.delete(f"{url}/{user_role.id}")

        # Assert
        assert assigned.json()["role_id"] == str(user_role.id)
        assert wrong_role.status_code == 400
        assert wrong_role.json()["error"] == (
            f"User with ID '{roleless_user.id}' does not have the role with ID '{manager_role.id}'"
        )
        assert removed.json() == {"success": True}

    def test_assign_unknown_role(self, manager_client: TestClient, roleless_user: User):
        response = manager_client.post(
            f"/api/v1/users/{roleless_user.id}/roles",
            json={"role_id": str(uuid4())},
        )

        assert response.status_code == 404

    def test_user_cannot_assign_roles(self, user_client: TestClient, roleless_user: User, user_role: Role):
        response = user_client.post(
            f"/api/v1/users/{roleless_user.id}/roles",
            json={"role_id": str(user_role.id)},
        )

        assert response.status_code == 403

    def test_user_subscriptions(self, user_client: TestClient, db_session: Session, sample_user: User):
        # Arrange
        get_repository_factory().subscriptions(db_session).create({
            "user_id": sample_user.id,
            "plan": "basic",
            "status": "active",
        })

        # Act
        response = user_client.get(f"/api/v1/users/{sample_user.id}/subscription")

        # Assert
        assert [s["plan"] for s in response.json()] == ["basic"]


class TestRolesAndPermissions:
    """Roles and permissions under /api/v1."""

    def test_user_cannot_list_roles(self, user_client: TestClient):
        assert user_client.get("/api/v1/roles").status_code == 403

    def test_admin_lists_and_creates_roles(self, admin_client: TestClient):
        created = admin_client.post("/api/v1/roles", json={"name": "Viewer"})
        listed = admin_client.get("/api/v1/roles", params={"limit": 10})

        assert created.status_code == 201
        assert "Viewer" in {r["name"] for r in listed.json()}

    def test_permissions_by_resource(self, admin_client: TestClient):
        response = admin_client.get("/api/v1/permissions", params={"resource": "users"})

        assert sorted(p["name"] for p in response.json()) == ["users:manage", "users:read"]

    def test_create_permission_conflict(self, admin_client: TestClient):
        response = admin_client.post(
            "/api/v1/permissions",
            json={"name": "users:read", "resource": "users", "action": "read"},
        )

        assert response.status_code == 409


class TestPublicSettings:
    """GET /api/v1/settings/public needs no session."""

    def test_public_settings(self, client: TestClient, db_session: Session):
        # Arrange
        get_repository_factory().settings(db_session).create({"key": "internal_flag", "value": "on"})

        # Act
        response = client.get("/api/v1/settings/public")

        # Assert
        assert response.status_code == 200
        assert [s["key"] for s in response.json()] == ["site_name", "support_email"]
