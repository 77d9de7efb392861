"""
Organization Schemas Module
===========================

Pydantic models for organization-related request/response validation.
"""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, EmailStr, Field, HttpUrl, field_validator

from reportflow.schemas.common import reject_null


# ==========================
# Base Schemas
# ==========================

class OrganizationBase(BaseModel):
    """Base organization schema with common fields."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Organization name"
    )
    description: Optional[str] = None
    website: Optional[HttpUrl] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=50)
    address: Optional[str] = None
    logo: Optional[str] = Field(default=None, max_length=500)


class OrganizationCreate(OrganizationBase):
    """Schema for creating a new organization."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Acme Corporation",
                "website": "https://acme.example.com",
                "email": "billing@acme.example.com"
            }
        }
    )


class OrganizationUpdate(BaseModel):
    """Schema for updating organization information."""

    name: Optional[str] = Field(
        default=None,
        min_length=1,
        max_length=255,
        description="New organization name"
    )
    description: Optional[str] = None
    website: Optional[HttpUrl] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=50)
    address: Optional[str] = None
    logo: Optional[str] = Field(default=None, max_length=500)

    @field_validator("name", mode="before")
    @classmethod
    def not_null(cls, v: Any) -> Any:
        return reject_null(v)


# ==========================
# Response Schemas
# ==========================

class OrganizationResponse(BaseModel):
    """Organization response schema."""

    id: UUID = Field(
        ...,
        description="Organization UUID"
    )
    name: str = Field(
        ...,
        description="Organization name"
    )
    description: Optional[str] = None
    website: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    logo: Optional[str] = None
    created_at: datetime = Field(
        ...,
        description="Creation timestamp"
    )
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "550e8400-e29b-41d4-a716-446655440001",
                "name": "Acme Corporation",
                "website": "https://acme.example.com/",
                "created_at": "2024-01-01T00:00:00Z"
            }
        }
    )
