"""Health check endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import get_settings
from ..core.logging import get_logger
from ..core.redis_client import get_redis_client
from ..core.schemas.common import HealthCheckResponse
from ..database import get_db_session

router = APIRouter(prefix="/health", tags=["health"])
logger = get_logger(__name__)


@router.get("", response_model=HealthCheckResponse)
async def health_check(session: AsyncSession = Depends(get_db_session)):
    """Database and Redis status. Redis being down only degrades rate limiting."""
    checks = {}
    try:
        await session.execute(text("SELECT 1"))
        checks["database"] = "healthy"
    except Exception:
        logger.exception("Database health check failed")
        checks["database"] = "unhealthy"

    checks["redis"] = "healthy" if await get_redis_client().ping() else "unavailable"
    status = "healthy" if checks["database"] == "healthy" else "unhealthy"
    return HealthCheckResponse(status=status, version=get_settings().app_version, checks=checks)
