"""
Health check endpoints.

Used for monitoring and load balancer health checks.
"""
import platform

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from core.infrastructure.database.config import get_engine
from core.settings import get_app_settings
from gyld_sdk.logging import get_logger
from gyld_sdk.utils.datetime import utc_now

logger = get_logger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check():
    """
    Health check endpoint.

    Returns system health status.
    """
    return {
        "status": "healthy",
        "timestamp": utc_now().isoformat(),
        "service": get_app_settings().orchestration.service_name,
        "version": "1.0.0",
        "python_version": platform.python_version(),
    }


@router.get("/health/ready")
async def readiness_check():
    """
    Readiness check endpoint.

    Checks the database and reports which channel providers are live.
    """
    settings = get_app_settings()
    database = "ok"
    try:
        async with get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as exc:
        logger.warning("readiness_database_failed", error=str(exc))
        database = "unavailable"

    ready = database == "ok"
    return JSONResponse(
        status_code=200 if ready else 503,
        content={
            "status": "ready" if ready else "not_ready",
            "timestamp": utc_now().isoformat(),
            "checks": {
                "api": "ok",
                "database": database,
                "push": "enabled" if settings.push.enabled else "mock",
                "email": "enabled" if settings.email.enabled else "mock",
            },
        },
    )
