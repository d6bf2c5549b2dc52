"""Auth endpoints (register, login, logout, refresh) and auth dependencies (get_current_user, require_manager)."""

import logging
from typing import Annotated

import jwt
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from nhatroso.core.config import get_settings
from nhatroso.core.database import get_db
from nhatroso.core.ratelimit import rate_limit
from nhatroso.core.security import decode_access_token, decode_refresh_token
from nhatroso.models import UserRole
from nhatroso.schemas.auth import (
    AuthResponse,
    CurrentUser,
    LoginRequest,
    MessageResponse,
    RefreshRequest,
    RegisterRequest,
    TokenPair,
)
from nhatroso.services import auth as auth_service
from nhatroso.services.auth import GENERIC_AUTH_ERROR, InvalidCredentialsError
from nhatroso.services.users import EmailAlreadyExistsError, get_user

logger = logging.getLogger(__name__)
router = APIRouter()
security = HTTPBearer(auto_error=False)

# Managers administer every account; there is no per-property tenancy scoping.
MANAGER_ROLES = frozenset({UserRole.OWNER.value, UserRole.ADMIN.value})


def _unauthorized(detail: str = GENERIC_AUTH_ERROR) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit("auth:register"))],
)
def register(
    body: RegisterRequest,
    db: Annotated[Session, Depends(get_db)],
) -> AuthResponse:
    """Create an owner account and return it with a first token pair."""
    try:
        return auth_service.register(db, body, get_settings())
    except EmailAlreadyExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message) from e


@router.post(
    "/login",
    response_model=AuthResponse,
    dependencies=[Depends(rate_limit("auth:login"))],
)
def login(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
) -> AuthResponse:
    """
    Authenticate with email and password; returns the user and a token pair.
    Include the access token in the Authorization header as: Bearer <accessToken>
    """
    try:
        return auth_service.login(db, body.email, body.password, get_settings())
    except InvalidCredentialsError as e:
        logger.info("Login rejected: %s", e.reason)
        raise _unauthorized(e.message) from e


@router.post("/refresh", response_model=TokenPair)
def refresh(
    body: RefreshRequest,
    db: Annotated[Session, Depends(get_db)],
) -> TokenPair:
    """Exchange a refresh token for a new pair. The presented token stops working."""
    try:
        payload = decode_refresh_token(body.refresh_token)
        user_id = int(payload["sub"])
    except (jwt.PyJWTError, KeyError, TypeError, ValueError) as e:
        logger.info("Refresh rejected: unreadable token (%s)", type(e).__name__)
        raise _unauthorized() from e
    try:
        return auth_service.refresh(db, user_id, body.refresh_token, get_settings())
    except InvalidCredentialsError as e:
        logger.info("Refresh rejected: %s", e.reason)
        raise _unauthorized(e.message) from e


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> CurrentUser:
    """Dependency: require valid Bearer access token and return the current user. Raises 401 if missing or invalid."""
    if credentials is None:
        raise _unauthorized("Not authenticated")
    try:
        payload = decode_access_token(credentials.credentials)
    except jwt.PyJWTError:
        raise _unauthorized("Invalid or expired token")
    try:
        user_id = int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise _unauthorized("Invalid token payload")
    user = get_user(db, user_id)
    if user is None or not user.is_active:
        raise _unauthorized("Invalid or expired token")
    return CurrentUser(id=user.id, email=user.email, role=user.role)


def require_manager(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> CurrentUser:
    """Dependency: require an owner or admin. Raises 403 otherwise."""
    if current_user.role not in MANAGER_ROLES:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Owner or admin access required",
        )
    return current_user


@router.post("/logout", response_model=MessageResponse)
def logout(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    """End the caller's session; their refresh token can no longer be exchanged."""
    auth_service.logout(db, current_user.id)
    return MessageResponse(message="Logged out")
