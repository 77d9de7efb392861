"""
Common Schemas Module
=====================

Response envelopes shared by every router.
"""

from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import AnyUrl, BaseModel, ConfigDict, Field


# ==========================
# Error Schemas
# ==========================

class ErrorResponse(BaseModel):
    """Standard error response schema."""

    error: str = Field(
        ...,
        description="Error message"
    )
    details: Optional[Any] = Field(
        default=None,
        description="Additional error details"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": "Organization with ID '550e8400-e29b-41d4-a716-446655440000' not found"
            }
        }
    )


class ValidationErrorDetail(BaseModel):
    """One invalid field."""

    field: str = Field(
        ...,
        description="Dotted location of the invalid field"
    )
    message: str = Field(
        ...,
        description="Error message"
    )
    type: str = Field(
        ...,
        description="Error type"
    )


class ValidationErrorResponse(BaseModel):
    """Validation error response schema."""

    error: str = Field(
        default="Validation error",
        description="Error summary"
    )
    details: List[ValidationErrorDetail] = Field(
        ...,
        description="List of validation errors"
    )


# ==========================
# Success Schemas
# ==========================

class SuccessResponse(BaseModel):
    """Acknowledgement for deletes and other actions without a body."""

    success: bool = Field(
        default=True,
        description="Whether the action succeeded"
    )


# ==========================
# Helpers
# ==========================

def model_values(payload: BaseModel, exclude_unset: bool = False) -> Dict[str, Any]:
    """
    Column values for a create/update payload.

    Enum members become their values and URLs plain strings; UUIDs and
    datetimes are kept as Python objects for the ORM.
    """
    data = payload.model_dump(exclude_unset=exclude_unset)
    for field, value in data.items():
        if isinstance(value, Enum):
            data[field] = value.value
        elif isinstance(value, AnyUrl):
            data[field] = str(value)
    return data


def reject_null(value: Any) -> Any:
    """
    Before-validator body for partial updates.

    Omitting a field leaves the column alone; an explicit ``null`` on a
    NOT NULL column is a validation error rather than a database error.
    """
    if value is None:
        raise ValueError("Field may not be null")
    return value
