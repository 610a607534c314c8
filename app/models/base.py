"""SQLAlchemy declarative Base shared by the user, branch and role models."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
