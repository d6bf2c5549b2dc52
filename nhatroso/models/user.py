"""ORM model for application users (credentials, role and current session)."""

import enum

from sqlalchemy import Boolean, Column, DateTime, Integer, String, false, func, true

from nhatroso.models.base import Base


class UserRole(str, enum.Enum):
    """Roles a user account can hold."""

    OWNER = "owner"
    ADMIN = "admin"
    STAFF = "staff"


class User(Base):
    """
    User account for JWT authentication and role-based access control.

    Never physically deleted: is_deleted hides the row from every lookup.
    refresh_token_hash holds the SHA-256 of the only refresh token that may
    currently be exchanged; NULL means no active session.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=False)
    phone = Column(String(32), nullable=True)
    role = Column(String(32), nullable=False, default=UserRole.OWNER.value)
    is_active = Column(Boolean, nullable=False, default=True, server_default=true())
    is_deleted = Column(Boolean, nullable=False, default=False, server_default=false())
    refresh_token_hash = Column(String(128), nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
