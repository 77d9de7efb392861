"""
Authentication Schemas Module
=============================

Pydantic models for authentication request/response validation.

Benefits:
- Request validation
- Response serialization
- OpenAPI documentation
- Type safety
"""

from typing import Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, EmailStr, Field


# ==========================
# Login Schemas
# ==========================

class LoginRequest(BaseModel):
    """Login request schema."""

    email: EmailStr = Field(
        ...,
        description="User email address",
        examples=["user@example.com"]
    )
    password: str = Field(
        ...,
        min_length=1,
        description="User password",
        examples=["SecureP@ss123"]
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "user@example.com",
                "password": "SecureP@ss123"
            }
        }
    )


class LoginResponse(BaseModel):
    """Signed-in user returned by /api/auth/login. The session travels in the cookie."""

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
        description="Account type (user or admin)"
    )

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "550e8400-e29b-41d4-a716-446655440000",
                "email": "user@example.com",
                "name": "Jane Doe",
                "role": "user"
            }
        }
    )


# ==========================
# Logout Schemas
# ==========================

class LogoutResponse(BaseModel):
    """Logout response schema."""

    success: bool = Field(
        default=True,
        description="Logout confirmation"
    )


# ==========================
# Registration Schemas
# ==========================

class RegisterRequest(BaseModel):
    """User registration request schema."""

    email: EmailStr = Field(
        ...,
        description="User email address"
    )
    password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        description="User password (min 8 characters)"
    )
    name: Optional[str] = Field(
        default=None,
        max_length=255,
        description="Display name"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "newuser@example.com",
                "password": "SecureP@ss123",
                "name": "New User"
            }
        }
    )
