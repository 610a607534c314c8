"""User store: active-user lookup and single-row writes on the users table."""

import logging
from datetime import UTC, datetime

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import PersistenceError
from app.models import User

logger = logging.getLogger(__name__)


def find_active_user_by_username(session: Session, username: str) -> User | None:
    """Return the active user with exactly this username, or None."""
    return (
        session.query(User)
        .filter(User.username == username, User.active.is_(True))
        .first()
    )


def persist_user(session: Session, user: User) -> None:
    """Commit pending changes on user. Raises PersistenceError if the write fails."""
    try:
        session.add(user)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        raise PersistenceError("Could not save the user record", cause=e) from e


def bootstrap_password_hash(session: Session, user: User, new_hash: str) -> bool:
    """
    Store new_hash only if the user still has no password hash.

    Returns True when this call wrote the hash, False when another writer got
    there first; either way user is refreshed with the stored value.
    Raises PersistenceError if the write fails.
    """
    try:
        updated = (
            session.query(User)
            .filter(
                User.id == user.id,
                or_(User.password_hash.is_(None), User.password_hash == ""),
            )
            .update({User.password_hash: new_hash}, synchronize_session=False)
        )
        session.commit()
        session.refresh(user)
    except SQLAlchemyError as e:
        session.rollback()
        raise PersistenceError("Could not save the user record", cause=e) from e
    return updated == 1


def record_last_access(session: Session, user: User) -> bool:
    """
    Best-effort update of last_access after a successful login.

    Database errors are logged and swallowed; returns whether the write succeeded.
    """
    # rollback() expires user, and reloading it may hit the same broken connection.
    username = user.username
    try:
        user.last_access = datetime.now(UTC)
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        logger.warning(
            "Could not update last access for user=%s", username, exc_info=True
        )
        return False
    logger.debug("Last access updated for user=%s", username)
    return True
