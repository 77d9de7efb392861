"""
Setting Schemas Module
======================
"""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field, field_validator

from reportflow.schemas.common import reject_null


class SettingCreate(BaseModel):
    """Schema for creating a setting."""

    key: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Unique setting key"
    )
    value: str = Field(
        ...,
        description="Setting value"
    )
    description: Optional[str] = None
    is_public: bool = Field(
        default=False,
        description="Exposed through /api/v1/settings/public"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "key": "site_name",
                "value": "ReportFlow",
                "is_public": True
            }
        }
    )


class SettingUpdate(BaseModel):
    """Schema for updating a setting."""

    key: Optional[str] = Field(default=None, min_length=1, max_length=255)
    value: Optional[str] = None
    description: Optional[str] = None
    is_public: Optional[bool] = None

    @field_validator("key", "value", "is_public", mode="before")
    @classmethod
    def not_null(cls, v: Any) -> Any:
        return reject_null(v)


class SettingResponse(BaseModel):
    """Setting response schema."""

    id: UUID
    key: str
    value: str
    description: Optional[str] = None
    is_public: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
