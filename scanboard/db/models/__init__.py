"""
SQLAlchemy models for the scan dashboard.

Exposes `Base`, `now_utc`, and all ORM classes.
"""

from .base import Base, now_utc  # re-export

from .users import User
from .scan_records import ScanRecord

__all__ = [
    "Base",
    "now_utc",
    "User",
    "ScanRecord",
]
