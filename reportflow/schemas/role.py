"""
Role & Permission Schemas Module
================================

Pydantic models for the RBAC endpoints.
"""

from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field, field_validator

from reportflow.core.enums import PermissionAction
from reportflow.schemas.common import reject_null


# ==========================
# Permission Schemas
# ==========================

class PermissionCreate(BaseModel):
    """Schema for creating a permission."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Unique permission name"
    )
    description: Optional[str] = None
    resource: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Resource the permission applies to"
    )
    action: PermissionAction = Field(
        ...,
        description="Allowed action; manage implies every action"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "reports:read",
                "description": "Read reports",
                "resource": "reports",
                "action": "read"
            }
        }
    )


class PermissionUpdate(BaseModel):
    """Schema for updating a permission."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    resource: Optional[str] = Field(default=None, min_length=1, max_length=100)
    action: Optional[PermissionAction] = None

    @field_validator("name", "resource", "action", mode="before")
    @classmethod
    def not_null(cls, v: Any) -> Any:
        return reject_null(v)


class PermissionResponse(BaseModel):
    """Permission response schema."""

    id: UUID
    name: str
    description: Optional[str] = None
    resource: str
    action: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class PermissionIdsRequest(BaseModel):
    """Body listing permission ids to grant or revoke."""

    permission_ids: List[UUID] = Field(
        ...,
        description="Permission UUIDs"
    )


class RolePermissionsResponse(BaseModel):
    """Permission ids currently granted to a role."""

    success: bool = True
    permission_ids: List[UUID]


# ==========================
# Role Schemas
# ==========================

class RoleCreate(BaseModel):
    """Schema for creating a role."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Unique role name"
    )
    description: Optional[str] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Analyst",
                "description": "Reads reports"
            }
        }
    )


class RoleUpdate(BaseModel):
    """Schema for updating a role."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def not_null(cls, v: Any) -> Any:
        return reject_null(v)


class RoleResponse(BaseModel):
    """Role response schema."""

    id: UUID
    name: str
    description: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
