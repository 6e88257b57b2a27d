import os

# Force the in-memory SQLite engine before scanboard.db.database is imported
os.environ.setdefault("PYTEST_RUNNING", "1")

import pytest
from fastapi.testclient import TestClient

import scanboard.db.database as db_module
from scanboard.api.main import create_app
from scanboard.db import models
from scanboard.services.auth_service import AuthService
from scanboard.utils.settings import Settings, refresh_settings_cache

@pytest.fixture(autouse=True)
def _fresh_schema():
    """Drop and recreate every table so each test starts from an empty database."""
    models.Base.metadata.drop_all(bind=db_module.engine)
    models.Base.metadata.create_all(bind=db_module.engine)
    refresh_settings_cache()
    yield
    refresh_settings_cache()

@pytest.fixture
def db_session():
    session = db_module.SessionLocal()
    try:
        yield session
    finally:
        session.close()

@pytest.fixture
def make_settings(tmp_path):
    def _factory(**overrides) -> Settings:
        values = {
            "upload_dir": str(tmp_path / "uploads"),
            "feed_interval_seconds": 0.01,
            "jwt_access_secret": "test-access-secret",
            "jwt_refresh_secret": "test-refresh-secret",
        }
        values.update(overrides)
        return Settings(**values)

    return _factory

@pytest.fixture
def make_client(make_settings):
    def _factory(**overrides) -> TestClient:
        return TestClient(create_app(make_settings(**overrides)))

    return _factory

@pytest.fixture
def client(make_client):
    """Memory backend, authentication disabled."""
    return make_client(auth_enabled=False)


@pytest.fixture
def admin_user(db_session, make_settings):
    return AuthService(db_session, make_settings()).ensure_admin()

