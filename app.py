"""
App assembly entry point.

Re-exports the FastAPI `app` from `repostats.api.main` so the service can be
started with ``uvicorn app:app``.
"""

from repostats.api.main import app  # noqa: F401
