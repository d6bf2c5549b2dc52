"""Pydantic request/response schemas."""

from nhatroso.schemas.auth import (
    AuthResponse,
    CurrentUser,
    LoginRequest,
    MessageResponse,
    RefreshRequest,
    RegisterRequest,
    TokenPair,
    UserSummary,
)
from nhatroso.schemas.health import HealthResponse
from nhatroso.schemas.users import (
    ChangePasswordRequest,
    ProfileUpdate,
    UserResponse,
    UsersListResponse,
    UserUpdate,
)

__all__ = [
    "AuthResponse",
    "ChangePasswordRequest",
    "CurrentUser",
    "HealthResponse",
    "LoginRequest",
    "MessageResponse",
    "ProfileUpdate",
    "RefreshRequest",
    "RegisterRequest",
    "TokenPair",
    "UserResponse",
    "UserSummary",
    "UsersListResponse",
    "UserUpdate",
]
