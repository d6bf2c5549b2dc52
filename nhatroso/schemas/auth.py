"""Request/response schemas for auth endpoints."""

from pydantic import EmailStr, Field, field_validator, model_validator

from nhatroso.schemas.base import CamelModel

# Password length bounds; bcrypt only ever sees the first 72 bytes.
PASSWORD_MIN_LEN = 6
PASSWORD_MAX_LEN = 128


class RegisterRequest(CamelModel):
    """New account details. Validated fully before anything is persisted."""

    email: EmailStr = Field(..., description="Login email (case-insensitive)")
    password: str = Field(
        ..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN, description="Password"
    )
    confirm_password: str = Field(..., max_length=PASSWORD_MAX_LEN, description="Must equal password")
    full_name: str = Field(..., min_length=1, max_length=255, description="Display name")
    phone: str = Field(..., min_length=1, max_length=32, description="Contact phone")

    @field_validator("full_name", "phone")
    @classmethod
    def strip_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @model_validator(mode="after")
    def passwords_match(self) -> "RegisterRequest":
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class LoginRequest(CamelModel):
    """Credentials for login. Only a non-empty password is required; a wrong one is a 401."""

    email: EmailStr = Field(..., description="Login email")
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN, description="Password")


class RefreshRequest(CamelModel):
    """Refresh token to exchange for a new pair."""

    refresh_token: str = Field(..., min_length=1, description="Current refresh token")


class TokenPair(CamelModel):
    """Access and refresh JWTs issued together."""

    access_token: str = Field(..., description="Short-lived JWT for the Authorization header")
    refresh_token: str = Field(..., description="Long-lived JWT, single use")
    token_type: str = Field(default="bearer", description="Token type")


class UserSummary(CamelModel):
    """Public identity returned alongside a token pair."""

    id: int
    email: str
    full_name: str
    role: str


class AuthResponse(TokenPair):
    """Register/login response: the user plus a fresh token pair."""

    user: UserSummary


class CurrentUser(CamelModel):
    """Authenticated user (id, email, role) for dependency injection."""

    id: int
    email: str
    role: str


class MessageResponse(CamelModel):
    message: str
