"""Health check endpoints."""

import logging
from datetime import datetime
from fastapi import APIRouter, Request

from portal_qa import __version__
from portal_qa.utils.config import settings

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/health")
async def health_check():
    """Basic health check."""
    return {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat() + "Z",
        "service": "portal-match-qa",
        "version": __version__
    }


@router.get("/health/ready")
async def readiness_check(request: Request):
    """Readiness probe."""
    checks = {
        "api": True,
        "run_store": hasattr(request.app.state, 'run_store'),
        "rate_limiter": hasattr(request.app.state, 'rate_limiter'),
    }

    limiter = getattr(request.app.state, "rate_limiter", None)
    return {
        "ready": all(checks.values()),
        "checks": checks,
        "runs": await limiter.get_status() if limiter else None,
        "timestamp": datetime.utcnow().isoformat() + "Z"
    }


@router.get("/health/config")
async def config_check():
    """Show non-sensitive configuration."""
    return {
        "environment": settings.ENVIRONMENT,
        "portal_base_url": settings.PORTAL_BASE_URL,
        "menu_container": settings.MENU_CONTAINER,
        "menu_prefix": settings.MENU_PREFIX,
        "readiness_timeout_ms": settings.READINESS_TIMEOUT_MS,
        "max_concurrent_runs": settings.MAX_CONCURRENT_RUNS,
        "env_guard_enabled": settings.ENV_GUARD_ENABLED,
        "credentials_configured": bool(settings.PORTAL_USERNAME and settings.PORTAL_PASSWORD),
    }
