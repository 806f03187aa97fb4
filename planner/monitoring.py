"""
Request metrics, request IDs and health reporting for the planner service.

Metrics are labelled by route template (``/api/tasks/{task_id}``), never by
the raw path, so task ids do not leak into label values. Requests that match
no route share the ``unmatched`` label.
"""
import sqlite3
import time
import uuid
import logging
from typing import Callable, Dict, Any, Optional
from contextvars import ContextVar

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from prometheus_client import Counter, Histogram, generate_latest

REQUEST_ID_HEADER = "X-Request-ID"
UNMATCHED_ROUTE = "unmatched"

request_id_var: ContextVar[str] = ContextVar('request_id', default='')

http_requests_total = Counter(
    'planner_http_requests_total',
    'Total number of HTTP requests',
    ['method', 'route', 'status_code']
)

http_request_duration_seconds = Histogram(
    'planner_http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'route'],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5)
)

http_errors_total = Counter(
    'planner_http_errors_total',
    'HTTP responses with status >= 400, and requests that raised',
    ['method', 'route', 'error_class']
)

# Monotonic, so uptime survives wall clock adjustments
_started_at = time.monotonic()

logger = logging.getLogger(__name__)


def get_request_id() -> str:
    """Get the current request ID from context."""
    return request_id_var.get('')


def set_request_id(request_id: str) -> None:
    request_id_var.set(request_id)


def uptime_seconds() -> float:
    return time.monotonic() - _started_at


def route_label(request: Request) -> str:
    """Route template the router matched, or UNMATCHED_ROUTE."""
    route = request.scope.get("route")
    path = getattr(route, "path", None)
    return path or UNMATCHED_ROUTE


def error_class(status_code: Optional[int]) -> Optional[str]:
    if status_code is None:
        return "exception"
    if status_code >= 500:
        return "server_error"
    if status_code >= 400:
        return "client_error"
    return None


def record_request(method: str, route: str, status_code: Optional[int], duration: float) -> None:
    """Update the request counters. status_code is None when the handler raised."""
    http_request_duration_seconds.labels(method=method, route=route).observe(duration)
    if status_code is not None:
        http_requests_total.labels(method=method, route=route, status_code=status_code).inc()
    kind = error_class(status_code)
    if kind:
        http_errors_total.labels(method=method, route=route, error_class=kind).inc()


class MetricsMiddleware(BaseHTTPMiddleware):
    """Assign a request ID, time the request and record it in Prometheus."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]
        set_request_id(request_id)
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            duration = time.perf_counter() - started
            record_request(request.method, route_label(request), None, duration)
            logger.error(
                f"{request.method} {request.url.path} raised after {duration:.4f}s",
                exc_info=True,
            )
            raise

        duration = time.perf_counter() - started
        record_request(request.method, route_label(request), response.status_code, duration)
        logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({duration:.4f}s)")

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def get_metrics() -> str:
    """Get Prometheus metrics in text format."""
    return generate_latest().decode('utf-8')


def check_database_health(db) -> Dict[str, Any]:
    """Run a trivial query and report connectivity and latency."""
    started = time.perf_counter()
    try:
        db.fetch_one("SELECT 1 AS ok")
    except sqlite3.Error as e:
        logger.warning(f"Database health check failed: {type(e).__name__}: {e}")
        return {
            "status": "unhealthy",
            "connectivity": "disconnected",
            "response_time_ms": round((time.perf_counter() - started) * 1000, 2),
            "error_type": type(e).__name__,
        }
    return {
        "status": "healthy",
        "connectivity": "connected",
        "response_time_ms": round((time.perf_counter() - started) * 1000, 2),
    }


def get_health_info(db=None) -> Dict[str, Any]:
    """Overall service health, including the database when one is given."""
    components: Dict[str, Any] = {"service": {"status": "healthy"}}
    if db is not None:
        components["database"] = check_database_health(db)

    healthy = all(component["status"] == "healthy" for component in components.values())
    return {
        "status": "healthy" if healthy else "unhealthy",
        "service": "planner-api",
        "timestamp": time.time(),
        "uptime_seconds": round(uptime_seconds(), 3),
        "components": components,
    }
