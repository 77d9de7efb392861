"""
Subscription Schemas Module
===========================
"""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field, field_validator

from reportflow.core.enums import SubscriptionPlan, SubscriptionStatus
from reportflow.schemas.common import reject_null


class SubscriptionCreate(BaseModel):
    """Schema for creating a subscription."""

    user_id: UUID = Field(
        ...,
        description="Subscribed user"
    )
    plan: SubscriptionPlan = SubscriptionPlan.FREE
    status: SubscriptionStatus = SubscriptionStatus.ACTIVE
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class SubscriptionUpdate(BaseModel):
    """Schema for updating a subscription."""

    plan: Optional[SubscriptionPlan] = None
    status: Optional[SubscriptionStatus] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @field_validator("plan", "status", "start_date", mode="before")
    @classmethod
    def not_null(cls, v: Any) -> Any:
        return reject_null(v)


class SubscriptionResponse(BaseModel):
    """Subscription response schema."""

    id: UUID
    user_id: UUID
    plan: str
    status: str
    start_date: datetime
    end_date: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
