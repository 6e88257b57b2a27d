"""
FastAPI app assembly: logging, middleware, partitions and router wiring.
"""
import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from scanboard.api.auth import router as auth_router
from scanboard.api.entities import router as entities_router
from scanboard.api.envelopes import EnvelopeError, envelope_error_handler, envelope_response
from scanboard.api.feed import router as feed_router
from scanboard.api.files import router as files_router
from scanboard.api.users import router as users_router
from scanboard.core import Envelope, PartitionDirectory
from scanboard.db.database import SessionLocal, init_db
from scanboard.db.repositories.scan_records import SqlPartitionDirectory
from scanboard.services.auth_service import AuthService
from scanboard.services.uploads import UploadStorage
from scanboard.utils.settings import Settings, get_settings

# Configure logging
LOG_LEVEL_NAME = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_LEVEL = getattr(logging, LOG_LEVEL_NAME, logging.INFO)
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)
logger.setLevel(LOG_LEVEL)


def build_directory(settings: Settings):
    if settings.storage_backend == "sql":
        return SqlPartitionDirectory(settings.partitions)
    return PartitionDirectory.from_names(settings.partitions)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    init_db()
    if settings.auth_enabled:
        with SessionLocal() as db:
            AuthService(db, settings).ensure_admin()
    logger.info(
        "app_startup: log_level=%s backend=%s partitions=%s auth=%s",
        LOG_LEVEL_NAME,
        settings.storage_backend,
        ",".join(settings.partitions),
        settings.auth_enabled,
    )
    yield


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(
        title="Repository Scan Dashboard",
        description="API for recording repository secret-scan results and browsing them per partition.",
        version="1.0.0",
        lifespan=lifespan,
    )
    # Avoid implicit trailing-slash redirects for predictable URLs
    app.router.redirect_slashes = False

    app.state.settings = settings
    app.state.directory = build_directory(settings)
    app.state.uploads = UploadStorage(settings.upload_dir, settings.max_upload_bytes)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(EnvelopeError, envelope_error_handler)

    @app.get("/api/health")
    def health():
        return envelope_response(Envelope.ok())

    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(entities_router)
    app.include_router(files_router)
    app.include_router(feed_router)
    return app


app = create_app()
