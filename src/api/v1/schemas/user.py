"""Pydantic schemas for User API."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from domain.entities.user import User

USERNAME_PATTERN = r"^[A-Za-z0-9_.-]+$"


def _normalise_email(v: str) -> str:
    v = v.strip().lower()
    if "@" not in v or "." not in v.split("@")[-1]:
        raise ValueError("Invalid email address")
    return v


class UserBase(BaseModel):
    """Fields shared by user create and update payloads."""

    username: str = Field(..., min_length=3, max_length=50, pattern=USERNAME_PATTERN)
    email: str = Field(..., min_length=3, max_length=100)
    first_name: str | None = Field(None, max_length=50)
    last_name: str | None = Field(None, max_length=50)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        """Basic email validation."""
        return _normalise_email(v)


class UserCreate(UserBase):
    """Schema for registering a user."""

    password: str = Field(..., min_length=8, max_length=128)


class UserUpdate(UserBase):
    """Schema for replacing a user's profile (not a partial patch)."""

    version: int | None = Field(None, ge=1, description="Expected current version")


class PasswordChange(BaseModel):
    """Schema for changing a user's password."""

    new_password: str = Field(..., min_length=8, max_length=128)


class UserResponse(BaseModel):
    """Schema for User response. The password hash is never exposed."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "username": "alice",
                "email": "alice@example.com",
                "first_name": "Alice",
                "last_name": "Smith",
                "full_name": "Alice Smith",
                "active": True,
                "version": 1,
                "created_at": "2026-01-28T10:00:00",
                "updated_at": "2026-01-28T10:00:00",
            }
        },
    )

    id: UUID
    username: str
    email: str
    first_name: str | None
    last_name: str | None
    full_name: str
    active: bool
    version: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, user: User) -> "UserResponse":
        return cls.model_validate(user)


class UserDetailResponse(BaseModel):
    """Schema for single User response."""

    data: UserResponse


class UserListResponse(BaseModel):
    """Schema for list of Users response."""

    data: list[UserResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class UserExistsResponse(BaseModel):
    """Existence flags for a username and/or email."""

    username_taken: bool | None = None
    email_registered: bool | None = None
