"""
Health endpoints.

``/health`` never fails: a missing database only degrades it, because the
dashboard endpoints keep answering with zero-valued read-models.
``/health/ready`` is the check that takes the instance out of rotation.
"""

from datetime import datetime
from typing import Any, Dict

import structlog
from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from marketplace_analytics.config import get_settings
from marketplace_analytics.database.connection import check_database_health
from marketplace_analytics.engine.periods import utcnow

logger = structlog.get_logger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    version: str
    environment: str
    timestamp: datetime
    checks: Dict[str, Any]


async def _database_is_up() -> Dict[str, Any]:
    result = await check_database_health()
    if result.get("status") != "healthy":
        logger.warning("Database health check failed", error=result.get("error"))
    return result


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    settings = get_settings()
    database = await _database_is_up()
    return HealthResponse(
        status="healthy" if database["status"] == "healthy" else "degraded",
        version=settings.version,
        environment=settings.app_env,
        timestamp=utcnow(),
        checks={"database": database},
    )


@router.get("/health/live")
async def liveness_check() -> Dict[str, str]:
    """The process is up and serving."""
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness_check(response: Response) -> Dict[str, str]:
    """503 until the database answers."""
    database = await _database_is_up()
    if database["status"] != "healthy":
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return {"status": "not_ready", "reason": "database_unavailable"}
    return {"status": "ready"}
