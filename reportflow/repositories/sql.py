"""
SQL Repository Implementations
==============================

Entity repositories built on SQLAlchemyRepository.

Each class adds the finders its entity needs on top of the generic
CRUD operations.
"""

from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy import func, select

from reportflow.models import (
    AuditLog,
    Organization,
    Permission,
    Report,
    Role,
    Setting,
    Subscription,
    User,
)
from reportflow.repositories.base import SQLAlchemyRepository


# ==========================
# Organizations
# ==========================

class OrganizationRepository(SQLAlchemyRepository[Organization]):
    model = Organization

    def find_by_name(self, name: str) -> Optional[Organization]:
        return self.db.scalars(select(Organization).where(Organization.name == name)).first()


# ==========================
# Permissions
# ==========================

class PermissionRepository(SQLAlchemyRepository[Permission]):
    model = Permission

    def find_by_name(self, name: str) -> Optional[Permission]:
        return self.db.scalars(select(Permission).where(Permission.name == name)).first()

    def find_by_resource(self, resource: str) -> List[Permission]:
        stmt = self._ordered(select(Permission).where(Permission.resource == resource))
        return self._all(stmt)

    def find_by_ids(self, permission_ids: Iterable[UUID]) -> List[Permission]:
        ids = list(permission_ids)
        if not ids:
            return []
        return self._all(select(Permission).where(Permission.id.in_(ids)))


# ==========================
# Roles
# ==========================

class RoleRepository(SQLAlchemyRepository[Role]):
    model = Role

    def find_by_name(self, name: str) -> Optional[Role]:
        return self.db.scalars(select(Role).where(Role.name == name)).first()

    def get_permissions(self, role_id: UUID) -> List[UUID]:
        """Return the ids of the permissions granted to a role."""
        role = self.find_by_id(role_id)
        if role is None:
            return []
        return role.permission_ids

    def assign_permissions(self, role_id: UUID, permission_ids: Iterable[UUID]) -> Optional[Role]:
        """
        Grant permissions to a role.

        Already granted and unknown permission ids are skipped.

        Returns:
            The updated role, or None if the role does not exist
        """
        role = self.find_by_id(role_id)
        if role is None:
            return None
        current = set(role.permission_ids)
        wanted = [pid for pid in dict.fromkeys(permission_ids) if pid not in current]
        if wanted:
            role.permissions.extend(PermissionRepository(self.db).find_by_ids(wanted))
            self._commit()
            self.db.refresh(role)
        return role

    def remove_permissions(self, role_id: UUID, permission_ids: Iterable[UUID]) -> Optional[Role]:
        """
        Revoke permissions from a role.

        Returns:
            The updated role, or None if the role does not exist
        """
        role = self.find_by_id(role_id)
        if role is None:
            return None
        to_remove = set(permission_ids)
        role.permissions = [p for p in role.permissions if p.id not in to_remove]
        self._commit()
        self.db.refresh(role)
        return role


# ==========================
# Users
# ==========================

class UserRepository(SQLAlchemyRepository[User]):
    model = User

    def find_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).where(func.lower(User.email) == email.strip().lower())
        return self.db.scalars(stmt).first()

    def find_by_organization(self, organization_id: UUID) -> List[User]:
        stmt = self._ordered(select(User).where(User.organization_id == organization_id))
        return self._all(stmt)

    def find_by_role(self, role_id: UUID) -> List[User]:
        return self._all(self._ordered(select(User).where(User.role_id == role_id)))

    def count_active(self) -> int:
        stmt = select(func.count()).select_from(User).where(User.is_active.is_(True))
        return self.db.scalar(stmt) or 0

    def count_locked(self) -> int:
        stmt = select(func.count()).select_from(User).where(User.is_locked.is_(True))
        return self.db.scalar(stmt) or 0

    def search(
        self,
        role: Optional[str] = None,
        is_active: Optional[bool] = None,
        organization_id: Optional[UUID] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[User]:
        stmt = select(User)
        if role is not None:
            stmt = stmt.where(User.role == role)
        if is_active is not None:
            stmt = stmt.where(User.is_active == is_active)
        if organization_id is not None:
            stmt = stmt.where(User.organization_id == organization_id)
        return self._all(self._paginate(self._ordered(stmt), limit, offset))

    def create(self, data: Dict[str, Any]) -> User:
        if data.get("email"):
            data = {**data, "email": data["email"].strip().lower()}
        return super().create(data)

    def update(self, entity_id: UUID, data: Dict[str, Any]) -> Optional[User]:
        if data.get("email"):
            data = {**data, "email": data["email"].strip().lower()}
        return super().update(entity_id, data)


# ==========================
# Reports
# ==========================

class ReportRepository(SQLAlchemyRepository[Report]):
    model = Report

    def find_by_type(self, report_type: str) -> List[Report]:
        return self._all(self._ordered(select(Report).where(Report.type == report_type)))

    def find_by_organization(self, organization_id: UUID) -> List[Report]:
        stmt = select(Report).where(Report.organization_id == organization_id)
        return self._all(self._ordered(stmt))

    def find_by_creator(self, user_id: UUID) -> List[Report]:
        return self._all(self._ordered(select(Report).where(Report.created_by_id == user_id)))

    def find_public(self) -> List[Report]:
        return self._all(self._ordered(select(Report).where(Report.is_public.is_(True))))


# ==========================
# Subscriptions
# ==========================

class SubscriptionRepository(SQLAlchemyRepository[Subscription]):
    model = Subscription

    def find_by_user_id(self, user_id: UUID) -> List[Subscription]:
        stmt = select(Subscription).where(Subscription.user_id == user_id)
        return self._all(self._ordered(stmt))

    def count_by_plan(self) -> Dict[str, int]:
        rows = self.db.execute(
            select(Subscription.plan, func.count(Subscription.id)).group_by(Subscription.plan)
        ).all()
        return {plan: count for plan, count in rows}


# ==========================
# Settings
# ==========================

class SettingRepository(SQLAlchemyRepository[Setting]):
    model = Setting

    def _ordered(self, stmt):
        return stmt.order_by(Setting.key)

    def find_by_key(self, key: str) -> Optional[Setting]:
        return self.db.scalars(select(Setting).where(Setting.key == key)).first()

    def find_public(self) -> List[Setting]:
        return self._all(self._ordered(select(Setting).where(Setting.is_public.is_(True))))


# ==========================
# Audit Logs
# ==========================

class AuditLogRepository(SQLAlchemyRepository[AuditLog]):
    """Append-only: update and delete are not available."""

    model = AuditLog

    def find_by_user_id(self, user_id: UUID) -> List[AuditLog]:
        return self._all(self._ordered(select(AuditLog).where(AuditLog.user_id == user_id)))

    def find_by_entity_id(self, entity_id: str) -> List[AuditLog]:
        stmt = select(AuditLog).where(AuditLog.entity_id == str(entity_id))
        return self._all(self._ordered(stmt))

    def update(self, entity_id: UUID, data: Dict[str, Any]) -> Optional[AuditLog]:
        raise NotImplementedError("Audit logs are append-only")

    def delete(self, entity_id: UUID) -> bool:
        raise NotImplementedError("Audit logs are append-only")
