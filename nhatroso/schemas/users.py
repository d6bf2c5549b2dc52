"""Schemas for profile and user administration endpoints."""

from datetime import datetime

from pydantic import Field, field_validator

from nhatroso.models.user import UserRole
from nhatroso.schemas.auth import PASSWORD_MAX_LEN, PASSWORD_MIN_LEN
from nhatroso.schemas.base import CamelModel


class UserResponse(CamelModel):
    """User as exposed by the API. Never carries password or token hashes."""

    id: int
    email: str
    full_name: str
    phone: str | None = None
    role: str
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class UsersListResponse(CamelModel):
    users: list[UserResponse]


class ProfileUpdate(CamelModel):
    """Fields a user may change on their own profile."""

    full_name: str | None = Field(default=None, min_length=1, max_length=255)
    phone: str | None = Field(default=None, min_length=1, max_length=32)

    @field_validator("full_name", "phone")
    @classmethod
    def strip_not_blank(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class UserUpdate(ProfileUpdate):
    """Fields an owner or admin may change on any account."""

    is_active: bool | None = None
    role: UserRole | None = None


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN)
    new_password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)
