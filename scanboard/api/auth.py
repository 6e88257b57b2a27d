"""
Authentication API endpoints.

Login, token refresh, logout, and admin-only account registration.
"""
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from scanboard.api.deps import get_app_settings, get_current_user, require_role
from scanboard.db import schemas
from scanboard.db.database import get_db
from scanboard.services.auth_service import USER_EXISTS, AuthError, AuthService
from scanboard.utils.settings import Settings

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _unauthorized(exc: AuthError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"message": exc.message, "code": exc.code},
    )


@router.post("/login", response_model=schemas.LoginResponse)
def login(
    payload: schemas.LoginRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    try:
        user, tokens = AuthService(db, settings).login(payload.username, payload.password)
    except AuthError as exc:
        raise _unauthorized(exc)
    return schemas.LoginResponse(user=schemas.User.model_validate(user), tokens=tokens)


@router.post("/refresh", response_model=schemas.LoginResponse)
def refresh(
    payload: schemas.RefreshRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    try:
        user, tokens = AuthService(db, settings).refresh_tokens(payload.refresh_token)
    except AuthError as exc:
        raise _unauthorized(exc)
    return schemas.LoginResponse(user=schemas.User.model_validate(user), tokens=tokens)


@router.post("/logout")
def logout(
    current_user: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    AuthService(db, settings).logout(current_user["id"])
    return {"message": "Logged out successfully"}


@router.post("/register", response_model=schemas.User, status_code=status.HTTP_201_CREATED)
def register(
    payload: schemas.UserCreate,
    _admin: Dict[str, Any] = Depends(require_role("admin")),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    try:
        return AuthService(db, settings).register(payload)
    except AuthError as exc:
        if exc.code == USER_EXISTS:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=exc.message)
        raise
