"""
Credential validation (with first-login bootstrap) and password change.

A user seeded without a password hash may set one by logging in: any
password of at least BOOTSTRAP_MIN_LEN characters is accepted once and its
hash stored. From then on only the hash decides, and only change_password
(which enforces the strength rules) replaces it.
"""

import logging
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from app.core.exceptions import (
    InvalidCredentialError,
    NotFoundOrInactiveError,
    WeakPasswordError,
)
from app.core.security import check_password_strength, hash_password, verify_password
from app.models import User
from app.services.users import (
    bootstrap_password_hash,
    find_active_user_by_username,
    persist_user,
)

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

BOOTSTRAP_MIN_LEN = 4

NOT_FOUND_OR_INACTIVE = "User not found or inactive"
INVALID_CREDENTIALS = "Invalid credentials"
USER_NOT_FOUND = "User not found"
CURRENT_PASSWORD_INCORRECT = "Current password is incorrect"


def validate_credentials(
    session: Session, username: str, password: str, settings: "Settings"
) -> User:
    """
    Return the active user if password is acceptable for username.

    Raises NotFoundOrInactiveError, InvalidCredentialError or PersistenceError.
    """
    logger.debug("Validating credentials for user=%s", username)
    user = find_active_user_by_username(session, username)
    if user is None:
        logger.warning("User not found or inactive during validation: %s", username)
        raise NotFoundOrInactiveError(NOT_FOUND_OR_INACTIVE)

    if not user.has_password:
        return _bootstrap(session, user, password, settings)

    if not verify_password(password, user.password_hash):
        raise InvalidCredentialError(INVALID_CREDENTIALS)
    return user


def _bootstrap(session: Session, user: User, password: str, settings: "Settings") -> User:
    if not password or len(password) < BOOTSTRAP_MIN_LEN:
        raise InvalidCredentialError(INVALID_CREDENTIALS)

    logger.info("First login for user=%s; storing password hash", user.username)
    new_hash = hash_password(password, settings.BCRYPT_ROUNDS)
    if bootstrap_password_hash(session, user, new_hash):
        return user

    # Another first login stored a hash between our read and our write.
    logger.warning(
        "Concurrent first login for user=%s; checking against the stored hash",
        user.username,
    )
    if verify_password(password, user.password_hash or ""):
        return user
    raise InvalidCredentialError(INVALID_CREDENTIALS)


def change_password(
    session: Session,
    username: str,
    current_password: str,
    new_password: str,
    settings: "Settings",
) -> User:
    """
    Replace the stored hash after checking the current password and the new one's strength.

    Users without a stored hash cannot use this flow; they must log in first.
    Raises NotFoundOrInactiveError, InvalidCredentialError, WeakPasswordError or PersistenceError.
    """
    user = find_active_user_by_username(session, username)
    if user is None:
        logger.warning("User not found for password change: %s", username)
        raise NotFoundOrInactiveError(USER_NOT_FOUND)

    if not verify_password(current_password, user.password_hash or ""):
        logger.warning("Incorrect current password for user=%s", username)
        raise InvalidCredentialError(CURRENT_PASSWORD_INCORRECT)

    strength = check_password_strength(new_password)
    if not strength.valid:
        logger.warning(
            "New password rejected for user=%s: %s", username, strength.message
        )
        raise WeakPasswordError(
            f"The new password does not meet the requirements: {strength.message}",
            strength.errors,
        )

    user.password_hash = hash_password(new_password, settings.BCRYPT_ROUNDS)
    persist_user(session, user)
    logger.info("Password updated for user=%s", username)
    return user
