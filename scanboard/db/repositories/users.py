"""
User repository functions.

Implements lookups, creation with password hashing, and refresh-token digest
updates for dashboard accounts.
"""
from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy.orm import Session

from scanboard.db import models, schemas
from scanboard.utils.passwords import hash_password


def get_user(db: Session, user_id: uuid.UUID) -> Optional[models.User]:
    return db.query(models.User).filter(models.User.id == user_id).first()


def get_user_by_username(db: Session, username: str) -> Optional[models.User]:
    return db.query(models.User).filter(models.User.username == username).first()


def create_user(db: Session, user: schemas.UserCreate) -> models.User:
    db_user = models.User(
        username=user.username,
        password_hash=hash_password(user.password),
        role=user.role,
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user


def set_refresh_token_digest(db: Session, user: models.User, digest: Optional[str]) -> models.User:
    user.refresh_token_hash = digest
    db.commit()
    db.refresh(user)
    return user


def clear_refresh_token(db: Session, user_id: uuid.UUID) -> bool:
    updated = (
        db.query(models.User)
        .filter(models.User.id == user_id)
        .update({models.User.refresh_token_hash: None}, synchronize_session=False)
    )
    db.commit()
    return bool(updated)
