"""
Audit Log Schemas Module
========================

Read-only views of the audit trail. There are no write schemas because
audit entries are created by the server only.
"""

import json
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, field_validator


class AuditLogResponse(BaseModel):
    """Audit log entry."""

    id: UUID
    user_id: Optional[UUID] = None
    action: str
    entity_type: str
    entity_id: Optional[str] = None
    details: Any = None
    ip_address: Optional[str] = None
    organization_id: Optional[UUID] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_validator("details", mode="before")
    @classmethod
    def parse_details(cls, v: Any) -> Any:
        if isinstance(v, str):
            try:
                return json.loads(v)
            except ValueError:
                return v
        return v


class DashboardResponse(BaseModel):
    """Admin back-office overview."""

    users: int
    active_users: int
    locked_users: int
    organizations: int
    roles: int
    permissions: int
    reports: int
    subscriptions_by_plan: Dict[str, int]
    recent_activity: List[AuditLogResponse]
