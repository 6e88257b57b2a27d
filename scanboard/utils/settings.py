"""Runtime settings sourced from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Literal, Tuple, cast

StorageBackend = Literal["memory", "sql"]

_STORAGE_BACKENDS = ("memory", "sql")
_DEFAULT_PARTITIONS = ("default", "ai")
_DEFAULT_CORS_ORIGINS = (
    "http://localhost",
    "http://localhost:3000",
    "http://localhost:5555",
)


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///./scanboard.db"
    storage_backend: StorageBackend = "memory"
    partitions: Tuple[str, ...] = _DEFAULT_PARTITIONS
    auth_enabled: bool = True
    jwt_access_secret: str = "change-me-access"
    jwt_refresh_secret: str = "change-me-refresh"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 7 * 24 * 60
    refresh_token_expire_minutes: int = 7 * 24 * 60
    admin_username: str = "admin"
    admin_password: str = "admin"
    upload_dir: str = "./uploads"
    max_upload_bytes: int = 100 * 1024 * 1024
    feed_interval_seconds: float = 2.5
    cors_origins: Tuple[str, ...] = _DEFAULT_CORS_ORIGINS


def _normalize_bool(value: str | None, default: bool = True) -> bool:
    """Return normalized boolean from environment-style value."""
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"", "0", "false", "no", "off"}:
        return False
    if normalized in {"1", "true", "yes", "on"}:
        return True
    return default


def _split_list(value: str | None, default: Tuple[str, ...]) -> Tuple[str, ...]:
    if value is None:
        return default
    items = tuple(entry.strip() for entry in value.split(",") if entry.strip())
    return items or default


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


def load_settings() -> Settings:
    """Build a fresh Settings instance from the current environment."""
    defaults = Settings()
    backend = (os.getenv("STORAGE_BACKEND") or defaults.storage_backend).strip().lower()
    if backend not in _STORAGE_BACKENDS:
        raise ValueError(f"STORAGE_BACKEND must be one of {_STORAGE_BACKENDS}, got {backend!r}")
    return Settings(
        database_url=os.getenv("DATABASE_URL") or defaults.database_url,
        storage_backend=cast(StorageBackend, backend),
        partitions=_split_list(os.getenv("PARTITIONS"), defaults.partitions),
        auth_enabled=_normalize_bool(os.getenv("AUTH_ENABLED"), default=defaults.auth_enabled),
        jwt_access_secret=os.getenv("JWT_ACCESS_SECRET") or defaults.jwt_access_secret,
        jwt_refresh_secret=os.getenv("JWT_REFRESH_SECRET") or defaults.jwt_refresh_secret,
        jwt_algorithm=os.getenv("JWT_ALGORITHM") or defaults.jwt_algorithm,
        access_token_expire_minutes=_int_env("ACCESS_TOKEN_EXPIRE_MINUTES", defaults.access_token_expire_minutes),
        refresh_token_expire_minutes=_int_env("REFRESH_TOKEN_EXPIRE_MINUTES", defaults.refresh_token_expire_minutes),
        admin_username=os.getenv("ADMIN_USERNAME") or defaults.admin_username,
        admin_password=os.getenv("ADMIN_PASSWORD") or defaults.admin_password,
        upload_dir=os.getenv("UPLOAD_DIR") or defaults.upload_dir,
        max_upload_bytes=_int_env("MAX_UPLOAD_BYTES", defaults.max_upload_bytes),
        feed_interval_seconds=_float_env("FEED_INTERVAL_SECONDS", defaults.feed_interval_seconds),
        cors_origins=_split_list(os.getenv("CORS_ORIGINS"), defaults.cors_origins),
    )


@lru_cache(maxsize=None)
def get_settings() -> Settings:
    """Return the cached settings sourced from the environment."""
    return load_settings()


def refresh_settings_cache() -> None:
    """Invalidate cached settings (useful for tests)."""
    get_settings.cache_clear()
