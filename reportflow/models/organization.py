"""
Organization Model
==================

Represents a tenant in the multi-tenant architecture.

Each organization:
- Groups users
- Owns reports
- Carries contact details shown in the admin console

Database Indexes:
- Primary key: id (UUID)
- Unique index: name
"""

import uuid
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import String, Text, Uuid
from sqlalchemy.orm import relationship, Mapped, mapped_column

from reportflow.db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from reportflow.models.user import User
    from reportflow.models.report import Report


class Organization(TimestampMixin, Base):
    """
    Organization Entity (Tenant Root).

    Users and reports reference an organization through a nullable
    foreign key. Deleting an organization detaches them rather than
    deleting them.

    Attributes:
        id: UUID primary key
        name: Unique organization name
        description: Free-form description
        website: Public website URL
        email: Contact email
        phone: Contact phone number
        address: Postal address
        logo: Logo URL
        users: Members of the organization
        reports: Reports assigned to the organization
    """

    __tablename__ = "organizations"

    # ==========================
    # Primary Key
    # ==========================
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    # ==========================
    # Organization Info
    # ==========================
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
    )
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    website: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    logo: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # ==========================
    # Relationships
    # ==========================
    users: Mapped[List["User"]] = relationship(
        "User",
        back_populates="organization",
        passive_deletes=True,
    )

    reports: Mapped[List["Report"]] = relationship(
        "Report",
        back_populates="organization",
        passive_deletes=True,
    )

    # ==========================
    # Methods
    # ==========================

    def __repr__(self) -> str:
        return f"<Organization(id={self.id}, name={self.name})>"

    @property
    def user_count(self) -> int:
        """
        Get the number of users in this organization.

        Returns:
            Number of users
        """
        return len(self.users) if self.users else 0

    def to_dict(self) -> dict:
        """
        Convert organization to dictionary.

        Returns:
            Dictionary with organization data
        """
        return {
            "id": str(self.id),
            "name": self.name,
            "description": self.description,
            "website": self.website,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "logo": self.logo,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
