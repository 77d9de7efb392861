"""
Audit Log Model
===============

Append-only record of security and data events.

Rows are never updated or deleted by the application. Deleting a user
keeps their audit history with user_id set to NULL.
"""

import json
import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from reportflow.db.base import Base


class AuditLog(Base):
    """
    Audit trail entry.

    Attributes:
        id: UUID primary key
        user_id: Acting user, if known
        action: AuditAction value
        entity_type: EntityType value
        entity_id: Identifier of the affected entity
        details: JSON document with event details
        ip_address: Client IP address
        organization_id: Tenant of the acting user
        created_at: Event timestamp
    """

    __tablename__ = "audit_logs"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    action: Mapped[str] = mapped_column(String(20), nullable=False)
    entity_type: Mapped[str] = mapped_column(String(20), nullable=False)
    entity_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    details: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    ip_address: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    organization_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("organizations.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        Index("ix_audit_logs_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<AuditLog(action={self.action}, entity_type={self.entity_type})>"

    @property
    def details_data(self) -> Any:
        if not self.details:
            return None
        try:
            return json.loads(self.details)
        except ValueError:
            return self.details
