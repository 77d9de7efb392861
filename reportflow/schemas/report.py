"""
Report Schemas Module
=====================

Pydantic models for report request/response validation.

``config`` is free-form JSON; it is stored as text and parsed back on
the way out.
"""

import json
from datetime import datetime
from typing import Any, Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field, field_validator

from reportflow.core.enums import ReportType
from reportflow.schemas.common import model_values, reject_null


class ReportCreate(BaseModel):
    """Schema for creating a report."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Report name"
    )
    description: Optional[str] = None
    type: ReportType = Field(
        ...,
        description="Report type"
    )
    config: Any = Field(
        default_factory=dict,
        description="Report configuration"
    )
    created_by_id: Optional[UUID] = Field(
        default=None,
        description="Author; defaults to the caller"
    )
    organization_id: Optional[UUID] = None
    is_public: bool = False

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Monthly revenue",
                "type": "financial",
                "config": {"period": "monthly"},
                "is_public": False
            }
        }
    )


class ReportUpdate(BaseModel):
    """Schema for updating a report."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    type: Optional[ReportType] = None
    config: Optional[Any] = None
    organization_id: Optional[UUID] = None
    is_public: Optional[bool] = None

    @field_validator("name", "type", "is_public", mode="before")
    @classmethod
    def not_null(cls, v: Any) -> Any:
        return reject_null(v)


def report_values(payload: BaseModel, exclude_unset: bool = False) -> dict:
    """Column values for a create/update payload with config serialized."""
    data = model_values(payload, exclude_unset=exclude_unset)
    if "config" in data:
        data["config"] = json.dumps(data["config"] if data["config"] is not None else {})
    return data


class ReportResponse(BaseModel):
    """Report response schema."""

    id: UUID
    name: str
    description: Optional[str] = None
    type: str
    config: Any = None
    created_by_id: Optional[UUID] = None
    organization_id: Optional[UUID] = None
    is_public: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("config", mode="before")
    @classmethod
    def parse_config(cls, v: Any) -> Any:
        if isinstance(v, str):
            try:
                return json.loads(v)
            except ValueError:
                return v
        return v


class ReportIdRequest(BaseModel):
    """Body referencing an existing report."""

    report_id: UUID
