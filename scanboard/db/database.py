"""
Database engine and session management.

Builds the SQLAlchemy engine from the configured DATABASE_URL with an
in-memory SQLite fallback for test runs, and exposes FastAPI dependencies.
"""
import logging
import os
import sys

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from scanboard.utils.settings import get_settings

logger = logging.getLogger(__name__)


def _is_pytest_runtime() -> bool:
    """Best-effort detection that we're executing under pytest.

    ``PYTEST_CURRENT_TEST`` is only set while an individual test is running, so
    also check for the pytest module which is imported before collection.
    ``PYTEST_RUNNING=1`` forces the behavior explicitly.
    """
    if os.getenv("PYTEST_RUNNING") == "1":
        return True
    if "PYTEST_CURRENT_TEST" in os.environ:
        return True
    return "pytest" in sys.modules


# Test override strategy:
# 1. SCANBOARD_TEST_DB wins when set.
# 2. Under pytest without an explicit URL, use a shared in-memory sqlite.
# 3. Otherwise use DATABASE_URL from settings.
explicit_test_db = os.getenv("SCANBOARD_TEST_DB")

if explicit_test_db:
    DATABASE_URL = explicit_test_db
elif _is_pytest_runtime():
    DATABASE_URL = "sqlite+pysqlite:///:memory:"
else:
    DATABASE_URL = get_settings().database_url


def _engine_kwargs(url: str) -> dict:
    if not url.startswith("sqlite"):
        return {"pool_pre_ping": True}
    kwargs: dict = {"connect_args": {"check_same_thread": False}}
    if ":memory:" in url:
        # StaticPool keeps one connection so the schema persists across sessions
        kwargs["poolclass"] = StaticPool
    return kwargs


engine = create_engine(DATABASE_URL, **_engine_kwargs(DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db() -> None:
    """Create tables for SQLite databases; other backends use Alembic migrations."""
    if not str(engine.url).startswith("sqlite"):
        return
    from scanboard.db import models  # local import to avoid circular import at module load

    models.Base.metadata.create_all(bind=engine)
    logger.info("schema_ready: url=%s", engine.url.render_as_string(hide_password=True))


def get_db():
    """Dependency to get a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
