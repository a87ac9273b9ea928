"""
Portal Match QA API

Endpoints:
- GET /health - Service health
- POST /runs - Start a Tools → Match workflow run
- GET /runs - List runs
- GET /runs/{id} - Run report (entries, batch result, stage events)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from portal_qa import __version__
from portal_qa.routers import health, runs
from portal_qa.services.browser_manager import get_browser_manager
from portal_qa.services.rate_limiter import RateLimiter
from portal_qa.services.run_store import RunStore
from portal_qa.utils.config import settings
from portal_qa.utils.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info("Portal Match QA API starting...")
    app.state.run_store = RunStore(settings.ARTIFACTS_PATH)
    app.state.rate_limiter = RateLimiter(max_concurrent=settings.MAX_CONCURRENT_RUNS)
    app.state.browser_manager = get_browser_manager()
    yield
    await app.state.browser_manager.close_all()
    logger.info("Portal Match QA API shutting down...")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Portal Match QA API",
        description="Readiness checks for the portal's Tools → Match screens",
        version=__version__,
        docs_url="/docs" if settings.ENABLE_DOCS else None,
        lifespan=lifespan
    )
    app.include_router(health.router, tags=["health"])
    app.include_router(runs.router, prefix="/runs", tags=["runs"])
    return app


app = create_app()
