"""
Health and build information endpoints.
"""
import os

from fastapi import APIRouter

from repostats import SERVICE_NAME
from repostats.utils.settings import get_settings

router = APIRouter(tags=["support"])


@router.get("/health")
def get_health():
    """Liveness probe. Does not touch the store."""
    return {
        "status": "ok",
        "service_name": SERVICE_NAME,
        "version": os.getenv("VERSION", "unknown"),
        "store_configured": get_settings().store_configured,
    }


@router.get("/build-info")
def get_build_info():
    """Return build and deployment information for the running service."""
    build_sha = os.getenv("BUILD_SHA")
    build_timestamp = os.getenv("BUILD_TIMESTAMP")
    image_tag = os.getenv("IMAGE_TAG")
    version = os.getenv("VERSION", "unknown")

    return {
        "build_sha": build_sha if build_sha else None,
        "build_timestamp": build_timestamp if build_timestamp else None,
        "image_tag": image_tag if image_tag else None,
        "service_name": SERVICE_NAME,
        "version": version,
    }
