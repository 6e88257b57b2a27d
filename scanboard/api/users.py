"""
Users API endpoints.

Currently exposes the caller's own profile.
"""
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from scanboard.api.deps import get_current_user
from scanboard.db import schemas
from scanboard.db.database import get_db
from scanboard.db.repositories import users as user_repo

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/profile", response_model=schemas.User)
def profile(
    current_user: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    user = user_repo.get_user(db, current_user["id"])
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user
