"""Error kinds raised by the credential and password flows.

Routes catch AuthError and turn its message into the response envelope;
nothing here is meant to reach the client as a raw exception.
"""


class AuthError(Exception):
    """Base for credential/password flow failures carrying a user-safe message."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class NotFoundOrInactiveError(AuthError):
    """No active user with that username (unknown and inactive are indistinguishable)."""


class InvalidCredentialError(AuthError):
    """Password did not pass the weak policy or did not match the stored hash."""


class WeakPasswordError(AuthError):
    """New password failed the strength rules; reasons lists every violated rule."""

    def __init__(self, message: str, reasons: list[str]) -> None:
        self.reasons = reasons
        super().__init__(message)


class InvalidArgumentError(AuthError, ValueError):
    """Empty input to hashing or an out-of-range length for password generation."""


class PersistenceError(AuthError):
    """Writing the user record failed."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.cause = cause
        super().__init__(message)
