"""Login, password change and the bearer-token dependency (get_current_user)."""

import logging
from typing import Annotated

import jwt
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.database import get_db
from app.core.exceptions import AuthError
from app.core.security import create_access_token, decode_access_token
from app.schemas.auth import (
    ApiResponse,
    ChangePasswordRequest,
    CurrentUser,
    LoginData,
    LoginRequest,
)
from app.services.credentials import change_password, validate_credentials
from app.services.users import find_active_user_by_username, record_last_access

logger = logging.getLogger(__name__)
router = APIRouter()
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


@router.post("/login", response_model=ApiResponse)
def login(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> ApiResponse:
    """
    Authenticate with username and password; returns a JWT in data.token.
    Include the token in the Authorization header as: Bearer <token>

    A user without a stored password sets it on this first login.
    """
    logger.info("Login attempt for user=%s", body.usuario)
    try:
        user = validate_credentials(db, body.usuario, body.password, settings)
    except AuthError as e:
        logger.warning("Login failed for user=%s: %s", body.usuario, e.message)
        return ApiResponse(is_success=False, message=e.message)

    # A failed last-access write expires user; do not touch it afterwards.
    username = user.username
    token = create_access_token(username, settings)
    record_last_access(db, user)
    logger.info("Login succeeded for user=%s", body.usuario)
    return ApiResponse(
        is_success=True,
        message="Token generated successfully",
        data=LoginData(token=token, usuario=username),
    )


@router.post("/cambiar-contrasena", response_model=ApiResponse)
def post_change_password(
    body: ChangePasswordRequest,
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> ApiResponse:
    """Change a password: the current one must verify and the new one must be strong."""
    logger.info("Password change requested for user=%s", body.usuario)
    try:
        change_password(
            db,
            body.usuario,
            body.contrasena_actual,
            body.contrasena_nueva,
            settings,
        )
    except AuthError as e:
        return ApiResponse(is_success=False, message=e.message)
    return ApiResponse(is_success=True, message="Password updated successfully")


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> CurrentUser:
    """Dependency: require valid Bearer JWT and return the current user. Raises 401 if missing or invalid."""
    if credentials is None:
        raise _unauthorized("Not authenticated")
    try:
        payload = decode_access_token(credentials.credentials, settings)
    except jwt.PyJWTError:
        raise _unauthorized("Invalid or expired token")
    username = payload.get("sub")
    if not username or not isinstance(username, str):
        raise _unauthorized("Invalid token payload")
    user = find_active_user_by_username(db, username)
    if user is None:
        raise _unauthorized("User not found or inactive")
    return CurrentUser.model_validate(user)


@router.get("/me", response_model=ApiResponse)
def get_me(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> ApiResponse:
    """Return the user the bearer token belongs to."""
    return ApiResponse(is_success=True, message="Authenticated", data=current_user)
