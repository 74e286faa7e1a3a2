"""
Health check routes for monitoring and service discovery.
Verifies service liveness, primary store and cache connectivity.
"""

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.api.deps import CacheDep, SessionDep
from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
def health_check() -> dict:
    """
    Basic health check endpoint.
    Returns service status and version information.
    """
    return {
        "status": "healthy",
        "service": settings.PROJECT_NAME,
        "version": settings.VERSION,
    }


@router.get("/health/db")
def database_health_check(session: SessionDep) -> dict:
    """Verify primary store connectivity with a trivial query."""
    try:
        session.connection().execute(text("SELECT 1")).scalar()
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        return {"status": "unhealthy", "database": "error"}
    return {"status": "healthy", "database": "ok"}


@router.get("/health/cache")
def cache_health_check(cache: CacheDep) -> dict:
    """
    Report cache connectivity.
    The API keeps serving from the primary store when the cache is down,
    so this reports "degraded" rather than "unhealthy".
    """
    if cache.ping():
        return {"status": "healthy", "cache": "ok"}
    return {"status": "degraded", "cache": "unavailable"}
