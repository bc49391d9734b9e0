"""Liveness and readiness endpoints."""

from typing import Literal

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from learnhub.core.config import settings
from learnhub.core.errors import get_request_id
from learnhub.core.redis_client import is_redis_available
from learnhub.db.session import get_db

router = APIRouter()

CheckStatus = Literal["ok", "degraded", "down"]


class HealthResponse(BaseModel):
    status: Literal["ok"] = "ok"


class ReadinessCheck(BaseModel):
    status: CheckStatus
    message: str | None = None


class ReadinessResponse(BaseModel):
    """Per-dependency readiness."""

    status: CheckStatus
    checks: dict[str, ReadinessCheck]
    snapshot_backend: str
    request_id: str


def _redis_check() -> ReadinessCheck:
    if not settings.REDIS_ENABLED:
        return ReadinessCheck(status="ok", message="Not enabled")
    if is_redis_available():
        return ReadinessCheck(status="ok")
    # Locks and the Redis snapshot store fail open without Redis
    return ReadinessCheck(
        status="down" if settings.REDIS_REQUIRED else "degraded",
        message="Redis unavailable",
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
)
async def health_check() -> HealthResponse:
    """Returns 200 while the process is alive."""
    return HealthResponse()


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    status_code=status.HTTP_200_OK,
    summary="Readiness check",
    description="Verifies database connectivity and, when enabled, Redis.",
)
def readiness_check(request: Request, db: Session = Depends(get_db)) -> ReadinessResponse:
    checks: dict[str, ReadinessCheck] = {}

    try:
        db.execute(text("SELECT 1"))
        checks["db"] = ReadinessCheck(status="ok")
    except SQLAlchemyError as e:
        checks["db"] = ReadinessCheck(status="down", message=str(e))

    checks["redis"] = _redis_check()

    statuses = {check.status for check in checks.values()}
    overall: CheckStatus = "down" if "down" in statuses else (
        "degraded" if "degraded" in statuses else "ok"
    )

    return ReadinessResponse(
        status=overall,
        checks=checks,
        snapshot_backend=settings.TREND_SNAPSHOT_BACKEND,
        request_id=get_request_id(request),
    )
