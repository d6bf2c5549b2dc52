"""
Session lifecycle: register, login, refresh-token rotation and logout.

Each user holds at most one valid refresh token. Its SHA-256 is stored on the
user row and overwritten whenever a new pair is issued, so a refresh token
works exactly once and a new login ends the session on any other device.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import TYPE_CHECKING

import jwt
from sqlalchemy.orm import Session

from nhatroso.core.security import (
    decode_refresh_token,
    hash_password,
    hash_refresh_token,
    issue_token_pair,
    refresh_token_matches,
    verify_password,
)
from nhatroso.models import User, UserRole
from nhatroso.schemas.auth import AuthResponse, RegisterRequest, TokenPair, UserSummary
from nhatroso.services.users import create_user, get_user, get_user_by_email, set_refresh_token_hash

if TYPE_CHECKING:
    from nhatroso.core.config import Settings

logger = logging.getLogger(__name__)

GENERIC_AUTH_ERROR = "Invalid credentials"


@lru_cache(maxsize=4)
def _dummy_password_hash(rounds: int) -> str:
    # Checked against when the email is unknown so both paths pay one bcrypt round.
    return hash_password("nhatroso-no-such-user", rounds=rounds)


class InvalidCredentialsError(Exception):
    """
    Raised for every authentication failure.

    The message is always the same generic text; `reason` is for server logs
    only and must never be sent to the client.
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason
        self.message = GENERIC_AUTH_ERROR
        super().__init__(self.message)


def _start_session(session: Session, user: User, settings: "Settings") -> TokenPair:
    pair = issue_token_pair(user.id, user.email, settings=settings)
    set_refresh_token_hash(session, user.id, hash_refresh_token(pair.refresh_token))
    return pair


def _auth_response(user: User, pair: TokenPair) -> AuthResponse:
    return AuthResponse(
        user=UserSummary.model_validate(user),
        access_token=pair.access_token,
        refresh_token=pair.refresh_token,
        token_type=pair.token_type,
    )


def register(session: Session, body: RegisterRequest, settings: "Settings") -> AuthResponse:
    """Create an owner account and open its first session. Raises EmailAlreadyExistsError."""
    user = create_user(
        session,
        email=body.email,
        password=body.password,
        full_name=body.full_name,
        phone=body.phone,
        role=UserRole.OWNER,
        settings=settings,
    )
    pair = _start_session(session, user, settings)
    logger.info("Registered user id=%s", user.id)
    return _auth_response(user, pair)


def login(session: Session, email: str, password: str, settings: "Settings") -> AuthResponse:
    """Verify credentials and issue a new pair, replacing any existing session."""
    user = get_user_by_email(session, email)
    if user is None:
        verify_password(password, _dummy_password_hash(settings.BCRYPT_ROUNDS))
        raise InvalidCredentialsError("unknown email")
    if not verify_password(password, user.password_hash):
        raise InvalidCredentialsError(f"wrong password for user id={user.id}")
    if not user.is_active:
        raise InvalidCredentialsError(f"inactive account user id={user.id}")

    pair = _start_session(session, user, settings)
    logger.info("Login succeeded for user id=%s", user.id)
    return _auth_response(user, pair)


def refresh(
    session: Session,
    user_id: int,
    presented_refresh_token: str,
    settings: "Settings",
) -> TokenPair:
    """
    Exchange the current refresh token for a new pair (rotation).

    The presented token must be a valid, unexpired refresh JWT for this user
    and must match the stored hash; afterwards it is no longer accepted.
    """
    try:
        payload = decode_refresh_token(presented_refresh_token, settings)
    except jwt.PyJWTError as e:
        raise InvalidCredentialsError(f"undecodable refresh token: {type(e).__name__}") from e
    if payload.get("sub") != str(user_id):
        raise InvalidCredentialsError(f"refresh token subject mismatch for user id={user_id}")

    user = get_user(session, user_id)
    if user is None:
        raise InvalidCredentialsError(f"refresh for missing user id={user_id}")
    if not user.is_active:
        raise InvalidCredentialsError(f"refresh for inactive user id={user_id}")
    if not refresh_token_matches(presented_refresh_token, user.refresh_token_hash):
        raise InvalidCredentialsError(f"stale or revoked refresh token for user id={user_id}")

    pair = _start_session(session, user, settings)
    logger.debug("Rotated refresh token for user id=%s", user_id)
    return pair


def logout(session: Session, user_id: int) -> None:
    """Forget the stored refresh token. Idempotent."""
    set_refresh_token_hash(session, user_id, None)
    logger.info("Logged out user id=%s", user_id)
