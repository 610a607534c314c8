"""SQLAlchemy ORM models."""

from app.models.base import Base
from app.models.user import Branch, Role, User

__all__ = ["Base", "Branch", "Role", "User"]
