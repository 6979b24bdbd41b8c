"""
FastAPI app assembly: logging, middleware and router wiring.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from repostats.utils.settings import get_settings

settings = get_settings()

# Configure logging
LOG_LEVEL_NAME = settings.log_level
LOG_LEVEL = getattr(logging, LOG_LEVEL_NAME, logging.INFO)
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)
logger.setLevel(LOG_LEVEL)
logger.info(
    "app_startup: log_level=%s store_configured=%s",
    LOG_LEVEL_NAME,
    settings.store_configured,
)

from repostats.api.repositories import router as repositories_router, DATA_SOURCE_HEADER
from repostats.api.support import router as support_router
from repostats.db.database import dispose_engines


@asynccontextmanager
async def lifespan(_app: FastAPI):
    yield
    dispose_engines()


app = FastAPI(
    title="Repository Stats Service",
    description="Read-only API for listing repository records and aggregate statistics.",
    version="1.0.0",
    lifespan=lifespan,
)

# Avoid implicit trailing-slash redirects for predictable URLs
app.router.redirect_slashes = False

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_methods=["GET"],
    allow_headers=["*"],
    expose_headers=[DATA_SOURCE_HEADER],
)

app.include_router(repositories_router)
app.include_router(support_router)
