"""Password hashing and access/refresh JWT issuing and verification."""

import hashlib
import hmac
import uuid
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

import bcrypt
import jwt

from nhatroso.core.config import get_settings
from nhatroso.schemas.auth import TokenPair

if TYPE_CHECKING:
    from nhatroso.core.config import Settings

# bcrypt ignores everything past this many bytes of input.
BCRYPT_MAX_BYTES = 72

TOKEN_TYPE_ACCESS = "access"
TOKEN_TYPE_REFRESH = "refresh"


def hash_password(plain_password: str, rounds: int | None = None) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    if rounds is None:
        rounds = get_settings().BCRYPT_ROUNDS
    pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def _encode(
    sub: str | int,
    email: str,
    token_type: str,
    secret: str,
    lifetime: timedelta,
    algorithm: str,
    now: datetime | None,
) -> str:
    issued_at = now or datetime.now(UTC)
    payload: dict[str, Any] = {
        "sub": str(sub),
        "email": email,
        "type": token_type,
        # Unique per token so two pairs minted in the same second never collide.
        "jti": uuid.uuid4().hex,
        "iat": issued_at,
        "exp": issued_at + lifetime,
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def create_access_token(
    sub: str | int,
    email: str,
    *,
    settings: "Settings | None" = None,
    now: datetime | None = None,
) -> str:
    """Create a short-lived access token signed with JWT_SECRET."""
    settings = settings or get_settings()
    return _encode(
        sub,
        email,
        TOKEN_TYPE_ACCESS,
        settings.JWT_SECRET.get_secret_value(),
        timedelta(minutes=settings.JWT_EXPIRE_MINUTES),
        settings.JWT_ALGORITHM,
        now,
    )


def create_refresh_token(
    sub: str | int,
    email: str,
    *,
    settings: "Settings | None" = None,
    now: datetime | None = None,
) -> str:
    """Create a long-lived refresh token signed with REFRESH_TOKEN_SECRET."""
    settings = settings or get_settings()
    return _encode(
        sub,
        email,
        TOKEN_TYPE_REFRESH,
        settings.REFRESH_TOKEN_SECRET.get_secret_value(),
        timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
        settings.JWT_ALGORITHM,
        now,
    )


def issue_token_pair(
    sub: str | int,
    email: str,
    *,
    settings: "Settings | None" = None,
    now: datetime | None = None,
) -> TokenPair:
    """Issue an access/refresh token pair for one subject. No side effects."""
    settings = settings or get_settings()
    now = now or datetime.now(UTC)
    return TokenPair(
        access_token=create_access_token(sub, email, settings=settings, now=now),
        refresh_token=create_refresh_token(sub, email, settings=settings, now=now),
    )


def _decode(token: str, secret: str, algorithm: str, expected_type: str) -> dict[str, Any]:
    payload = jwt.decode(
        token,
        secret,
        algorithms=[algorithm],
        options={"require": ["sub", "exp", "iat"]},
    )
    if payload.get("type") != expected_type:
        raise jwt.InvalidTokenError(f"Expected a {expected_type} token")
    return payload


def decode_access_token(token: str, settings: "Settings | None" = None) -> dict[str, Any]:
    """
    Decode and validate an access token; return its payload.
    Raises jwt.PyJWTError on invalid, expired or wrong-type tokens.
    """
    settings = settings or get_settings()
    return _decode(
        token,
        settings.JWT_SECRET.get_secret_value(),
        settings.JWT_ALGORITHM,
        TOKEN_TYPE_ACCESS,
    )


def decode_refresh_token(token: str, settings: "Settings | None" = None) -> dict[str, Any]:
    """
    Decode and validate a refresh token; return its payload.
    Raises jwt.PyJWTError on invalid, expired or wrong-type tokens.
    """
    settings = settings or get_settings()
    return _decode(
        token,
        settings.REFRESH_TOKEN_SECRET.get_secret_value(),
        settings.JWT_ALGORITHM,
        TOKEN_TYPE_REFRESH,
    )


def hash_refresh_token(token: str) -> str:
    """SHA-256 hex digest of a refresh token, as stored on the user record."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def refresh_token_matches(token: str, stored_hash: str | None) -> bool:
    """Constant-time check of a presented refresh token against the stored hash."""
    if not stored_hash:
        return False
    return hmac.compare_digest(hash_refresh_token(token), stored_hash)
