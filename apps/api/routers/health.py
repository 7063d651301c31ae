"""Health check router: liveness + readiness."""

import structlog
from fastapi import APIRouter

from apps.api.core.config import settings
from packages import ingestion_engine

router = APIRouter(tags=["health"])
logger = structlog.get_logger()


@router.get("/health")
async def health_liveness():
    """Liveness probe: returns 200 if the API process is running."""
    return {
        "status": "healthy",
        "service": "api",
        "version": settings.APP_VERSION,
        "engines": {"ingestion": ingestion_engine.__version__},
    }


@router.get("/health/ready")
async def health_readiness():
    """Readiness probe: checks that the Supabase backend is configured.

    Does not call Supabase; a slow backend must not fail the probe.
    """
    status = {
        "status": "healthy",
        "services": {
            "api": "up",
            "supabase": "configured",
        },
    }

    if not settings.supabase_configured:
        status["services"]["supabase"] = "missing_config"
        status["status"] = "degraded"
        logger.warning("supabase_not_configured")

    return status
