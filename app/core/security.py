"""Password hashing, strength rules, random passwords and JWT issuance/validation."""

import secrets
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

import bcrypt
import jwt

from app.core.exceptions import InvalidArgumentError

if TYPE_CHECKING:
    from app.core.config import Settings

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

# bcrypt only looks at the first 72 bytes of the password; request schemas reject longer ones.
BCRYPT_MAX_BYTES = 72

PASSWORD_MIN_LEN = 8
GENERATED_PASSWORD_MIN_LEN = 8

UPPERCASE = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
LOWERCASE = "abcdefghijklmnopqrstuvwxyz"
DIGITS = "0123456789"
SPECIALS = "!@#$%^&*()-_=+[]{}|;:,.<>?"

STRENGTH_OK_MESSAGE = "Password meets the security criteria"
EMPTY_PASSWORD_MESSAGE = "Password cannot be empty"

# Claims every token we accept must carry.
REQUIRED_CLAIMS = ["exp", "iat", "sub", "jti", "iss", "aud"]

_sysrand = secrets.SystemRandom()


@dataclass(frozen=True)
class PasswordStrength:
    """Result of check_password_strength: valid flag, display message and each violation."""

    valid: bool
    message: str
    errors: list[str] = field(default_factory=list)


def hash_password(plain_password: str, work_factor: int = BCRYPT_ROUNDS) -> str:
    """Hash a plain-text password; salt and cost are embedded in the returned string."""
    if not plain_password:
        raise InvalidArgumentError("Password cannot be empty")
    pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=work_factor)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """
    Verify a plain password against a stored hash.

    Empty inputs and malformed hashes are reported as a plain mismatch.
    """
    if not plain_password or not hashed:
        return False
    pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except Exception:
        return False


def check_password_strength(plain_password: str) -> PasswordStrength:
    """Apply every strength rule and report all violations, not just the first."""
    if not plain_password:
        return PasswordStrength(False, EMPTY_PASSWORD_MESSAGE, [EMPTY_PASSWORD_MESSAGE])

    errors: list[str] = []
    if len(plain_password) < PASSWORD_MIN_LEN:
        errors.append(f"Must be at least {PASSWORD_MIN_LEN} characters long")
    if not any(c.isupper() for c in plain_password):
        errors.append("Must contain at least one uppercase letter")
    if not any(c.islower() for c in plain_password):
        errors.append("Must contain at least one lowercase letter")
    if not any(c.isdigit() for c in plain_password):
        errors.append("Must contain at least one digit")
    if not any(not (c.isalpha() or c.isdigit()) for c in plain_password):
        errors.append("Must contain at least one special character")

    if errors:
        return PasswordStrength(False, ", ".join(errors), errors)
    return PasswordStrength(True, STRENGTH_OK_MESSAGE)


def generate_random_password(length: int = 12) -> str:
    """Random password with at least one upper, lower, digit and special character."""
    if length < GENERATED_PASSWORD_MIN_LEN:
        raise InvalidArgumentError(
            f"Password length must be at least {GENERATED_PASSWORD_MIN_LEN} characters"
        )

    chars = [
        _sysrand.choice(UPPERCASE),
        _sysrand.choice(LOWERCASE),
        _sysrand.choice(DIGITS),
        _sysrand.choice(SPECIALS),
    ]
    alphabet = UPPERCASE + LOWERCASE + DIGITS + SPECIALS
    chars.extend(_sysrand.choice(alphabet) for _ in range(length - len(chars)))

    # Fisher-Yates over the whole buffer so the guaranteed classes are not in fixed slots.
    for i in range(len(chars) - 1, 0, -1):
        j = _sysrand.randint(0, i)
        chars[i], chars[j] = chars[j], chars[i]
    return "".join(chars)


def create_access_token(username: str, settings: "Settings") -> str:
    """Create a signed JWT for username with sub, jti, iat, exp, iss and aud."""
    now = datetime.now(UTC)
    expire = now + timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
    payload: dict[str, Any] = {
        "sub": username,
        "jti": str(uuid.uuid4()),
        "iat": int(now.timestamp()),
        "exp": expire,
        "iss": settings.JWT_ISSUER,
        "aud": settings.JWT_AUDIENCE,
    }
    secret = settings.JWT_KEY.get_secret_value()
    return jwt.encode(
        payload,
        secret,
        algorithm=settings.JWT_ALGORITHM,
    )


def decode_access_token(token: str, settings: "Settings") -> dict[str, Any]:
    """
    Decode and validate JWT; return payload (sub, jti, iat, exp, iss, aud).

    Signature, expiry, issuer and audience are all checked with no clock skew.
    Raises jwt.PyJWTError on invalid or expired token.
    """
    secret = settings.JWT_KEY.get_secret_value()
    return jwt.decode(
        token,
        secret,
        algorithms=[settings.JWT_ALGORITHM],
        audience=settings.JWT_AUDIENCE,
        issuer=settings.JWT_ISSUER,
        leeway=0,
        options={"require": REQUIRED_CLAIMS},
    )
