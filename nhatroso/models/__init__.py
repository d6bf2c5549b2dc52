"""SQLAlchemy ORM models."""

from nhatroso.models.base import Base
from nhatroso.models.user import User, UserRole

__all__ = ["Base", "User", "UserRole"]
