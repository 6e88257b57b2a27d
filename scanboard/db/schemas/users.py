import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, field_validator

Role = Literal["user", "admin"]


class UserBase(BaseModel):
    username: str
    role: Role = "user"


class UserCreate(UserBase):
    password: str

    @field_validator("username")
    @classmethod
    def _validate_username(cls, v: str):
        cleaned = (v or "").strip()
        if not cleaned:
            raise ValueError("username must not be empty")
        if len(cleaned) > 80:
            raise ValueError("username must be at most 80 characters")
        return cleaned

    @field_validator("password")
    @classmethod
    def _validate_password(cls, v: str):
        if not v:
            raise ValueError("password must not be empty")
        return v


class User(UserBase):
    id: uuid.UUID
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)
