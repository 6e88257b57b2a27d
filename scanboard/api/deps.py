"""
API dependency helpers.

Provides the authenticated caller, role checks, and the repository selected by
the ``repo_name`` query parameter.
"""
from typing import Any, Dict, Optional

from fastapi import Depends, Header, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from scanboard.api.envelopes import EnvelopeError
from scanboard.core.envelope import REPO_NOT_FOUND, REPO_UNDEFINED, Envelope
from scanboard.db.database import get_db
from scanboard.db.repositories import users as user_repo
from scanboard.services.auth_service import AuthError, AuthService
from scanboard.utils.settings import Settings

# Contract:
# get_current_user returns {"id", "username", "role"} for a valid Bearer access token.
# Raises 401 when the token is missing, expired, invalid, or names a deleted user.


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization[7:].strip()
        return token or None
    return None


def get_current_user(
    authorization: Optional[str] = Header(default=None),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> Dict[str, Any]:
    token = _bearer_token(authorization)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"message": "Access token required", "code": "TOKEN_MISSING"},
        )
    try:
        claims = AuthService(db, settings).verify_access_token(token)
    except AuthError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"message": exc.message, "code": exc.code},
        )
    user = user_repo.get_user(db, claims["id"])
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"message": "Invalid token user", "code": "INVALID_TOKEN"},
        )
    return {"id": user.id, "username": user.username, "role": user.role}


def require_role(*roles: str):
    """Dependency factory rejecting callers whose role is not in ``roles``."""

    def _checker(current_user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
        if current_user.get("role") not in roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
        return current_user

    return _checker


def get_caller(
    authorization: Optional[str] = Header(default=None),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> Optional[Dict[str, Any]]:
    """Authenticated user, or None (anonymous) when authentication is disabled."""
    if not settings.auth_enabled:
        return None
    return get_current_user(authorization=authorization, db=db, settings=settings)


def get_repository(
    request: Request,
    repo_name: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
    caller: Optional[Dict[str, Any]] = Depends(get_caller),
):
    if repo_name is None or not repo_name.strip():
        raise EnvelopeError(Envelope.fail(REPO_UNDEFINED), status.HTTP_400_BAD_REQUEST)
    owner_id = caller["id"] if caller else None
    repo = request.app.state.directory.open(repo_name.strip(), db=db, owner_id=owner_id)
    if repo is None:
        raise EnvelopeError(Envelope.fail(REPO_NOT_FOUND), status.HTTP_404_NOT_FOUND)
    return repo
