"""Pydantic request/response schemas."""

from app.schemas.auth import (
    ApiResponse,
    ChangePasswordRequest,
    CurrentUser,
    LoginData,
    LoginRequest,
)
from app.schemas.health import HealthResponse

__all__ = [
    "ApiResponse",
    "ChangePasswordRequest",
    "CurrentUser",
    "HealthResponse",
    "LoginData",
    "LoginRequest",
]
