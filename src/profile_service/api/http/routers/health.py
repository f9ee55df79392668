"""Health check endpoint surfacing database pool state."""

from typing import Any

from fastapi import APIRouter, Depends
from starlette.responses import JSONResponse

from src.profile_service.api.http.deps import (
    get_database_service,
    get_metrics,
    get_profile_service,
)
from src.profile_service.api.http.metrics import MetricsSink
from src.profile_service.core.services import DbSessionService, ProfileService

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=None)
def health(
    database_service: DbSessionService = Depends(get_database_service),
    metrics: MetricsSink = Depends(get_metrics),
    profile_service: ProfileService = Depends(get_profile_service),
) -> dict[str, Any] | JSONResponse:
    """Report database connectivity and refresh the active-connection gauge.

    Returns 503 when the database cannot be reached.
    """
    healthy = database_service.health_check()
    pool_status = database_service.get_pool_status()
    metrics.set_db_connections(pool_status["checked_out"])

    body = {
        "status": "healthy" if healthy else "unhealthy",
        "database": {
            "status": "healthy" if healthy else "unhealthy",
            "pool": pool_status,
        },
        "cache_entries": len(profile_service.cache),
    }
    if not healthy:
        return JSONResponse(status_code=503, content=body)
    return body
