"""
Authentication service: password login, JWT issue/verify and refresh rotation.

Access and refresh tokens are HS256 JWTs signed with separate secrets. Only a
SHA-256 digest of the current refresh token is stored on the user row, so a
refresh token is single-use and logout invalidates it.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple

from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy.orm import Session

from scanboard.db import models, schemas
from scanboard.db.repositories import users as user_repo
from scanboard.utils.passwords import digest_token, hash_password, needs_rehash, token_matches, verify_password
from scanboard.utils.settings import Settings, get_settings

logger = logging.getLogger(__name__)

TOKEN_EXPIRED = "TOKEN_EXPIRED"
INVALID_TOKEN = "INVALID_TOKEN"
INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
USER_EXISTS = "USER_EXISTS"


class AuthError(Exception):
    """Authentication failure carrying a machine-readable code."""

    def __init__(self, message: str, code: str = INVALID_TOKEN):
        super().__init__(message)
        self.message = message
        self.code = code


class AuthService:
    def __init__(self, db: Session, settings: Optional[Settings] = None):
        self.db = db
        self.settings = settings or get_settings()

    def _encode(self, user: models.User, token_type: str) -> str:
        if token_type == "access":
            secret = self.settings.jwt_access_secret
            minutes = self.settings.access_token_expire_minutes
        else:
            secret = self.settings.jwt_refresh_secret
            minutes = self.settings.refresh_token_expire_minutes
        now = datetime.now(timezone.utc)
        payload: Dict[str, Any] = {
            "sub": str(user.id),
            "username": user.username,
            "role": user.role,
            "type": token_type,
            "iat": now,
            "exp": now + timedelta(minutes=minutes),
            # Two tokens minted in the same second must still differ
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(payload, secret, algorithm=self.settings.jwt_algorithm)

    def _decode(self, token: str, token_type: str) -> Dict[str, Any]:
        secret = self.settings.jwt_access_secret if token_type == "access" else self.settings.jwt_refresh_secret
        try:
            claims = jwt.decode(token, secret, algorithms=[self.settings.jwt_algorithm])
        except ExpiredSignatureError:
            raise AuthError("Token expired", TOKEN_EXPIRED)
        except JWTError:
            raise AuthError("Invalid token", INVALID_TOKEN)
        if claims.get("type") != token_type or not claims.get("sub"):
            raise AuthError("Invalid token", INVALID_TOKEN)
        return claims

    def _issue_pair(self, user: models.User) -> schemas.TokenPair:
        access = self._encode(user, "access")
        refresh = self._encode(user, "refresh")
        user_repo.set_refresh_token_digest(self.db, user, digest_token(refresh))
        return schemas.TokenPair(access_token=access, refresh_token=refresh)

    def register(self, payload: schemas.UserCreate) -> models.User:
        if user_repo.get_user_by_username(self.db, payload.username):
            raise AuthError("Username already exists", USER_EXISTS)
        user = user_repo.create_user(self.db, payload)
        logger.info("user_registered: username=%s role=%s", user.username, user.role)
        return user

    def login(self, username: str, password: str) -> Tuple[models.User, schemas.TokenPair]:
        user = user_repo.get_user_by_username(self.db, (username or "").strip())
        if not user or not verify_password(password, user.password_hash):
            raise AuthError("Invalid credentials", INVALID_CREDENTIALS)
        if needs_rehash(user.password_hash):
            user.password_hash = hash_password(password)
        return user, self._issue_pair(user)

    def refresh_tokens(self, refresh_token: str) -> Tuple[models.User, schemas.TokenPair]:
        """Exchange a refresh token for a new pair; the old refresh token stops working."""
        claims = self._decode(refresh_token, "refresh")
        try:
            user_id = uuid.UUID(str(claims["sub"]))
        except ValueError:
            raise AuthError("Invalid token", INVALID_TOKEN)
        user = user_repo.get_user(self.db, user_id)
        if not user or not token_matches(refresh_token, user.refresh_token_hash):
            raise AuthError("Invalid refresh token", INVALID_TOKEN)
        return user, self._issue_pair(user)

    def logout(self, user_id: uuid.UUID) -> bool:
        return user_repo.clear_refresh_token(self.db, user_id)

    def verify_access_token(self, token: str) -> Dict[str, Any]:
        claims = self._decode(token, "access")
        try:
            user_id = uuid.UUID(str(claims["sub"]))
        except ValueError:
            raise AuthError("Invalid token", INVALID_TOKEN)
        return {"id": user_id, "username": claims.get("username"), "role": claims.get("role")}

    def ensure_admin(self) -> models.User:
        """Create the configured admin account when it does not exist yet."""
        existing = user_repo.get_user_by_username(self.db, self.settings.admin_username)
        if existing:
            return existing
        admin = user_repo.create_user(
            self.db,
            schemas.UserCreate(
                username=self.settings.admin_username,
                password=self.settings.admin_password,
                role="admin",
            ),
        )
        logger.info("admin_seeded: username=%s", admin.username)
        return admin
