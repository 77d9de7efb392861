"""
Report Model
============

A saved report definition. ``config`` holds the builder configuration
as a JSON document stored in a text column.
"""

import json
import uuid
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import Boolean, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import relationship, Mapped, mapped_column

from reportflow.core.enums import ReportType
from reportflow.db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from reportflow.models.organization import Organization


class Report(TimestampMixin, Base):
    """
    Report definition owned by a creator and optionally an organization.

    Attributes:
        id: UUID primary key
        name: Report name
        description: Free-form description
        type: financial / usage / performance / custom
        config: JSON configuration string
        created_by_id: User who created the report
        organization_id: Organization the report is assigned to
        is_public: Visible to everyone when true
    """

    __tablename__ = "reports"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ReportType.CUSTOM.value,
        index=True,
    )
    config: Mapped[str] = mapped_column(Text, nullable=False, default="{}")

    created_by_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    organization_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("organizations.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    organization: Mapped[Optional["Organization"]] = relationship(
        "Organization",
        back_populates="reports",
    )

    def __repr__(self) -> str:
        return f"<Report(id={self.id}, name={self.name}, type={self.type})>"

    @property
    def config_data(self) -> Any:
        """Decoded configuration, or an empty dict when it is not valid JSON."""
        try:
            return json.loads(self.config or "{}")
        except ValueError:
            return {}
