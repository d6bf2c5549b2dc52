"""Credential store: user lookups and writes, always excluding soft-deleted rows."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from nhatroso.core.security import hash_password, verify_password
from nhatroso.models import User, UserRole

if TYPE_CHECKING:
    from nhatroso.core.config import Settings

logger = logging.getLogger(__name__)


class EmailAlreadyExistsError(Exception):
    """Raised when registering or creating a user whose email is taken."""

    def __init__(self, email: str) -> None:
        self.email = email
        self.message = "Email already exists"
        super().__init__(self.message)


class UserNotFoundError(Exception):
    """Raised when a user id does not resolve to a live (non-deleted) user."""

    def __init__(self, user_id: int) -> None:
        self.user_id = user_id
        self.message = "User not found"
        super().__init__(self.message)


class IncorrectPasswordError(Exception):
    """Raised when a password change presents the wrong current password."""

    def __init__(self) -> None:
        self.message = "Current password is incorrect"
        super().__init__(self.message)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _live_users(session: Session):
    return session.query(User).filter(User.is_deleted.is_(False))


def get_user_by_email(session: Session, email: str) -> User | None:
    return _live_users(session).filter(User.email == normalize_email(email)).first()


def get_user(session: Session, user_id: int) -> User | None:
    return _live_users(session).filter(User.id == user_id).first()


def require_user(session: Session, user_id: int) -> User:
    user = get_user(session, user_id)
    if user is None:
        raise UserNotFoundError(user_id)
    return user


def list_users(session: Session) -> list[User]:
    return _live_users(session).order_by(User.id).all()


def create_user(
    session: Session,
    *,
    email: str,
    password: str,
    full_name: str,
    phone: str | None = None,
    role: UserRole | str = UserRole.OWNER,
    settings: "Settings",
) -> User:
    """
    Persist a new user with a bcrypt password hash.

    Email is a unique column, so an address held by a soft-deleted account is
    still taken. Raises EmailAlreadyExistsError.
    """
    normalized = normalize_email(email)
    if session.query(User.id).filter(User.email == normalized).first() is not None:
        raise EmailAlreadyExistsError(normalized)

    user = User(
        email=normalized,
        password_hash=hash_password(password, rounds=settings.BCRYPT_ROUNDS),
        full_name=full_name.strip(),
        phone=phone.strip() if phone else None,
        role=UserRole(role).value,
    )
    session.add(user)
    try:
        session.commit()
    except IntegrityError as e:
        # Lost a race against a concurrent registration of the same email.
        session.rollback()
        raise EmailAlreadyExistsError(normalized) from e
    session.refresh(user)
    logger.info("Created user id=%s role=%s", user.id, user.role)
    return user


def update_user(
    session: Session,
    user_id: int,
    *,
    full_name: str | None = None,
    phone: str | None = None,
    is_active: bool | None = None,
    role: UserRole | str | None = None,
) -> User:
    """Apply the given changes; None leaves a field untouched. Deactivation ends the session."""
    user = require_user(session, user_id)
    if full_name is not None:
        user.full_name = full_name.strip()
    if phone is not None:
        user.phone = phone.strip()
    if role is not None:
        user.role = UserRole(role).value
    if is_active is not None:
        user.is_active = is_active
        if not is_active:
            user.refresh_token_hash = None
    session.commit()
    session.refresh(user)
    return user


def change_password(
    session: Session,
    user_id: int,
    current_password: str,
    new_password: str,
    settings: "Settings",
) -> None:
    """Replace the password hash after verifying the current password."""
    user = require_user(session, user_id)
    if not verify_password(current_password, user.password_hash):
        raise IncorrectPasswordError()
    user.password_hash = hash_password(new_password, rounds=settings.BCRYPT_ROUNDS)
    session.commit()
    logger.info("Password changed for user id=%s", user_id)


def soft_delete_user(session: Session, user_id: int) -> None:
    """Flag the user deleted and drop any session. Raises UserNotFoundError if already gone."""
    updated = (
        _live_users(session)
        .filter(User.id == user_id)
        .update(
            {User.is_deleted: True, User.refresh_token_hash: None},
            synchronize_session=False,
        )
    )
    if updated == 0:
        session.rollback()
        raise UserNotFoundError(user_id)
    session.commit()
    logger.info("Soft-deleted user id=%s", user_id)


def set_refresh_token_hash(session: Session, user_id: int, token_hash: str | None) -> None:
    """Overwrite the stored refresh-token hash in one UPDATE (None ends the session)."""
    session.query(User).filter(User.id == user_id).update(
        {User.refresh_token_hash: token_hash},
        synchronize_session=False,
    )
    session.commit()
