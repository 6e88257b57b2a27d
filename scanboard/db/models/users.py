import uuid
from sqlalchemy import Column, String, DateTime, Uuid
from .base import Base, now_utc


class User(Base):
    __tablename__ = 'users'
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    username = Column(String(80), nullable=False, unique=True, index=True)
    password_hash = Column(String, nullable=False)
    # 'user'|'admin'
    role = Column(String(20), nullable=False, default='user')
    # SHA-256 of the current refresh token; never the raw token
    refresh_token_hash = Column(String(64), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)
