"""
User Model
==========

Security Features:
- PBKDF2 salted password hash (never serialized)
- Account lock after configurable failed attempts
- Token version for session invalidation on logout
- Soft disable via is_active flag

Database Indexes:
- Primary key: id (UUID)
- Unique index: email
- Index: organization_id, role_id
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    String,
    Boolean,
    Integer,
    DateTime,
    ForeignKey,
    Index,
    Uuid,
)
from sqlalchemy.orm import relationship, Mapped, mapped_column

from reportflow.core.enums import UserRole
from reportflow.db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from reportflow.models.organization import Organization
    from reportflow.models.role import Role


class User(TimestampMixin, Base):
    """
    User entity representing authenticated console users.

    Two notions of "role" coexist:
        role: account type ("user" or "admin"). Admins reach the back-office.
        role_id: RBAC role whose permissions gate the /api/v1 endpoints.

    Attributes:
        id: UUID primary key
        email: Unique, lower-cased email address
        name: Display name
        hashed_password: "salt:hash" PBKDF2 string
        role: Account type
        role_id: Foreign key to roles (nullable)
        organization_id: Foreign key to organizations (nullable)
        is_active: Account active status
        failed_attempts: Failed login counter
        is_locked: Account lock status
        token_version: Incremented on logout to revoke sessions
        last_login: Timestamp of last successful login
    """

    __tablename__ = "users"

    def __init__(self, **kwargs):
        """Initialize User with Python-level defaults."""
        kwargs.setdefault("role", UserRole.USER.value)
        kwargs.setdefault("is_active", True)
        kwargs.setdefault("failed_attempts", 0)
        kwargs.setdefault("is_locked", False)
        kwargs.setdefault("token_version", 1)
        if kwargs.get("email"):
            kwargs["email"] = kwargs["email"].lower()
        super().__init__(**kwargs)

    # ==========================
    # Primary Key
    # ==========================
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    # ==========================
    # Authentication
    # ==========================
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )

    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    # ==========================
    # Authorization
    # ==========================
    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=UserRole.USER.value,
    )

    role_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("roles.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    assigned_role: Mapped[Optional["Role"]] = relationship(
        "Role",
        back_populates="users",
        lazy="selectin",
    )

    # ==========================
    # Tenant Membership
    # ==========================
    organization_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("organizations.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    organization: Mapped[Optional["Organization"]] = relationship(
        "Organization",
        back_populates="users",
    )

    # ==========================
    # Account Status
    # ==========================
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    # Lockout Protection
    failed_attempts: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )

    is_locked: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    # Session Version Control
    token_version: Mapped[int] = mapped_column(
        Integer,
        default=1,
        nullable=False,
    )

    last_login: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    __table_args__ = (
        Index("ix_users_role", "role"),
    )

    # ==========================
    # Methods
    # ==========================

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    def lock_account(self) -> None:
        """Lock the user account."""
        self.is_locked = True

    def unlock_account(self) -> None:
        """Unlock the user account and reset failed attempts."""
        self.is_locked = False
        self.failed_attempts = 0

    def increment_failed_attempts(self, max_attempts: int = 5) -> bool:
        """
        Increment failed login attempts.

        Args:
            max_attempts: Maximum attempts before lockout

        Returns:
            True if account should be locked
        """
        self.failed_attempts += 1
        if self.failed_attempts >= max_attempts:
            self.lock_account()
            return True
        return False

    def invalidate_sessions(self) -> None:
        """Invalidate all sessions by incrementing version."""
        self.token_version += 1

    def to_dict(self) -> dict:
        """
        Convert user to dictionary (excludes sensitive data).

        Returns:
            Dictionary with user data
        """
        return {
            "id": str(self.id),
            "email": self.email,
            "name": self.name,
            "role": self.role,
            "role_id": str(self.role_id) if self.role_id else None,
            "organization_id": str(self.organization_id) if self.organization_id else None,
            "is_active": self.is_active,
            "is_locked": self.is_locked,
            "last_login": self.last_login.isoformat() if self.last_login else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
