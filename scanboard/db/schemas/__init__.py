"""
Pydantic schemas for the scan dashboard, re-exported from their domain modules.
"""

from .records import KeyMarker, ScanResult, RepositoryRecord
from .users import Role, UserBase, UserCreate, User
from .auth import LoginRequest, RefreshRequest, TokenPair, LoginResponse

__all__ = [
    # Records
    "KeyMarker",
    "ScanResult",
    "RepositoryRecord",
    # Users
    "Role",
    "UserBase",
    "UserCreate",
    "User",
    # Auth
    "LoginRequest",
    "RefreshRequest",
    "TokenPair",
    "LoginResponse",
]
