"""ORM models for users, the branch they belong to and their role."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, true
from sqlalchemy.orm import relationship

from app.models.base import Base


class Role(Base):
    """Role catalog entry (e.g. administrator, instructor)."""

    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)

    users = relationship("User", back_populates="role")


class Branch(Base):
    """School branch (campus) a user is assigned to."""

    __tablename__ = "branches"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    code = Column(String(300), nullable=True)
    active = Column(Boolean, nullable=False, default=True, server_default=true())

    users = relationship("User", back_populates="branch")


class User(Base):
    """
    User account for login and JWT authentication.

    password_hash is NULL (or empty) until the first successful login stores
    one; inactive users are invisible to authentication.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    branch_id = Column(Integer, ForeignKey("branches.id"), nullable=False)
    role_id = Column(Integer, ForeignKey("roles.id"), nullable=False)
    username = Column(String(80), nullable=False, unique=True, index=True)
    name = Column(String(150), nullable=False)
    active = Column(Boolean, nullable=False, default=True, server_default=true())
    password_hash = Column(String(250), nullable=True)
    last_access = Column(DateTime(timezone=True), nullable=True)

    branch = relationship("Branch", back_populates="users")
    role = relationship("Role", back_populates="users")

    @property
    def has_password(self) -> bool:
        return bool(self.password_hash)
