"""
App assembly entry point.

Re-exports the FastAPI `app` from `scanboard.api.main` so `uvicorn app:app`
works from the repository root.
"""

from scanboard.api.main import app  # noqa: F401
