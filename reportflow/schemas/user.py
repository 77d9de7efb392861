"""
User Schemas Module
===================

Pydantic models for user-related request/response validation.

Benefits:
- Request validation
- Response serialization
- Sensitive data exclusion (the password hash never leaves the server)
"""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from reportflow.core.enums import UserRole
from reportflow.schemas.common import reject_null


# ==========================
# Request Schemas
# ==========================

class UserUpdate(BaseModel):
    """Schema for updating user information (admin use)."""

    name: Optional[str] = Field(
        default=None,
        max_length=255,
        description="Display name"
    )
    email: Optional[EmailStr] = Field(
        default=None,
        description="New email address"
    )
    role: Optional[UserRole] = Field(
        default=None,
        description="Account type"
    )
    role_id: Optional[UUID] = Field(
        default=None,
        description="RBAC role"
    )
    organization_id: Optional[UUID] = Field(
        default=None,
        description="Organization membership"
    )
    is_active: Optional[bool] = Field(
        default=None,
        description="Account active status"
    )

    @field_validator("email", "role", "is_active", mode="before")
    @classmethod
    def not_null(cls, v: Any) -> Any:
        return reject_null(v)


class UserIdRequest(BaseModel):
    """Body referencing an existing user."""

    user_id: UUID


class RoleIdRequest(BaseModel):
    """Body referencing an existing role."""

    role_id: UUID


# ==========================
# Response Schemas
# ==========================

class UserResponse(BaseModel):
    """User response schema (excludes sensitive data)."""

    id: UUID = Field(
        ...,
        description="User UUID"
    )
    email: str = Field(
        ...,
        description="User email address"
    )
    name: Optional[str] = Field(
        default=None,
        description="Display name"
    )
    role: str = Field(
        ...,
        description="Account type"
    )
    role_id: Optional[UUID] = Field(
        default=None,
        description="RBAC role"
    )
    organization_id: Optional[UUID] = Field(
        default=None,
        description="Organization ID"
    )
    is_active: bool = Field(
        ...,
        description="Account active status"
    )
    is_locked: bool = Field(
        ...,
        description="Account locked status"
    )
    last_login: Optional[datetime] = None
    created_at: datetime = Field(
        ...,
        description="Account creation timestamp"
    )
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "550e8400-e29b-41d4-a716-446655440000",
                "email": "user@example.com",
                "name": "Jane Doe",
                "role": "user",
                "role_id": "550e8400-e29b-41d4-a716-446655440002",
                "organization_id": "550e8400-e29b-41d4-a716-446655440001",
                "is_active": True,
                "is_locked": False,
                "last_login": None,
                "created_at": "2024-01-15T10:30:00Z",
                "updated_at": "2024-01-15T10:30:00Z"
            }
        }
    )


class AccountUnlockResponse(BaseModel):
    """Account unlock response schema."""

    success: bool = True
    user_id: UUID
    is_locked: bool
