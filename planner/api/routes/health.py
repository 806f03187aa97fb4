"""
Health and metrics API routes.
"""
from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST

from planner.dependencies.services import get_services
from planner.monitoring import get_health_info, get_metrics

router = APIRouter(tags=["health"])


@router.get("/health")
def health_check(request: Request):
    """Health check with component status (database, service)."""
    health_info = get_health_info(get_services(request).db)

    if health_info.get("status") == "unhealthy":
        return JSONResponse(content=health_info, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
    return health_info


@router.get("/metrics")
def metrics():
    """Prometheus metrics endpoint."""
    return Response(content=get_metrics(), media_type=CONTENT_TYPE_LATEST)
