"""Business logic services package with public service helpers."""

from .auth_service import AuthError, AuthService
from .feed import next_data_point, stream_feed
from .uploads import UploadError, UploadStorage

__all__ = [
    "AuthError",
    "AuthService",
    "next_data_point",
    "stream_feed",
    "UploadError",
    "UploadStorage",
]
