"""
Role & Permission Models
========================

RBAC primitives:
- Permission: a (resource, action) pair such as ("reports", "read")
- Role: a named bundle of permissions
- role_permissions: many-to-many join table

Deleting a role or a permission removes its join rows (ON DELETE CASCADE).
"""

import uuid
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Column, ForeignKey, String, Table, Text, Uuid
from sqlalchemy.orm import relationship, Mapped, mapped_column

from reportflow.core.enums import PermissionAction
from reportflow.db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from reportflow.models.user import User


# ==========================
# Join Table
# ==========================
role_permissions = Table(
    "role_permissions",
    Base.metadata,
    Column(
        "role_id",
        Uuid(as_uuid=True),
        ForeignKey("roles.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "permission_id",
        Uuid(as_uuid=True),
        ForeignKey("permissions.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Permission(TimestampMixin, Base):
    """Grant of one action on one resource."""

    __tablename__ = "permissions"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    resource: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    action: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=PermissionAction.READ.value,
    )

    roles: Mapped[List["Role"]] = relationship(
        "Role",
        secondary=role_permissions,
        back_populates="permissions",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Permission(name={self.name}, {self.resource}:{self.action})>"

    def grants(self, resource: str, action: str) -> bool:
        """True if this permission allows ``action`` on ``resource``."""
        if self.resource != resource:
            return False
        return self.action in (action, PermissionAction.MANAGE.value)


class Role(TimestampMixin, Base):
    """Named set of permissions assigned to users through role_id."""

    __tablename__ = "roles"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    permissions: Mapped[List[Permission]] = relationship(
        Permission,
        secondary=role_permissions,
        back_populates="roles",
        lazy="selectin",
        passive_deletes=True,
    )

    users: Mapped[List["User"]] = relationship(
        "User",
        back_populates="assigned_role",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Role(id={self.id}, name={self.name})>"

    @property
    def permission_ids(self) -> List[uuid.UUID]:
        return [permission.id for permission in self.permissions]

    def has_permission(self, resource: str, action: str) -> bool:
        return any(permission.grants(resource, action) for permission in self.permissions)
