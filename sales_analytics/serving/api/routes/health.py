"""
Health Check Endpoints
"""

from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter, Request, Response
from pydantic import BaseModel

from sales_analytics.config import get_settings

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    version: str
    environment: str
    timestamp: datetime
    checks: Dict[str, Any]


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Application status and snapshot availability"""
    settings = get_settings()
    snapshot = getattr(request.app.state, "snapshot", None)
    load_result = getattr(request.app.state, "load_result", None)

    if snapshot is not None:
        checks = {"snapshot": {"status": "healthy", "rows": snapshot.row_counts}}
        status = "healthy"
    else:
        checks = {"snapshot": {"status": "unavailable"}}
        if load_result is not None:
            checks["snapshot"]["errors"] = load_result.warnings
        status = "degraded"

    return HealthResponse(
        status=status,
        version=settings.version,
        environment=settings.app_env,
        timestamp=datetime.utcnow(),
        checks=checks,
    )


@router.get("/health/live")
async def liveness_check() -> Dict[str, str]:
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness_check(request: Request, response: Response) -> Dict[str, str]:
    """Ready once a snapshot is loaded"""
    if getattr(request.app.state, "snapshot", None) is None:
        response.status_code = 503
        return {"status": "not_ready", "reason": "snapshot_unavailable"}
    return {"status": "ready"}
