"""Request/response schemas for auth endpoints.

Field names follow the client's JSON (usuario, contrasenaActual, ...).
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from app.core.security import BCRYPT_MAX_BYTES


def _check_password_bytes(v: str) -> str:
    # bcrypt ignores everything past BCRYPT_MAX_BYTES, so longer passwords would collide.
    if len(v.encode("utf-8")) > BCRYPT_MAX_BYTES:
        raise ValueError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes in UTF-8")
    return v


class ApiResponse(BaseModel):
    """Uniform response envelope: {isSuccess, message, data}."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    is_success: bool = Field(..., description="Whether the operation succeeded")
    message: str = Field(default="", description="User-facing message")
    data: Any = Field(default=None, description="Operation payload, if any")


class LoginRequest(BaseModel):
    """Credentials for login."""

    usuario: str = Field(..., min_length=1, max_length=80, description="Username")
    password: str = Field(
        ..., min_length=1, max_length=BCRYPT_MAX_BYTES, description="Password"
    )

    @field_validator("password")
    @classmethod
    def validate_password_bytes(cls, v: str) -> str:
        return _check_password_bytes(v)


class LoginData(BaseModel):
    """Payload of a successful login."""

    token: str = Field(..., description="JWT bearer token")
    usuario: str = Field(..., description="Authenticated username")


class ChangePasswordRequest(BaseModel):
    """Current and new password for the password-change flow."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    usuario: str = Field(..., min_length=1, max_length=80, description="Username")
    contrasena_actual: str = Field(
        ..., min_length=1, max_length=BCRYPT_MAX_BYTES, description="Current password"
    )
    contrasena_nueva: str = Field(
        ..., min_length=1, max_length=BCRYPT_MAX_BYTES, description="New password"
    )

    @field_validator("contrasena_actual", "contrasena_nueva")
    @classmethod
    def validate_password_bytes(cls, v: str) -> str:
        return _check_password_bytes(v)


class CurrentUser(BaseModel):
    """Authenticated user resolved from the bearer token."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    name: str
    role_id: int
    branch_id: int
