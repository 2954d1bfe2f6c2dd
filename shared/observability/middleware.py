"""
FastAPI middleware for HTTP metrics.

Requests are labelled by route template (``/api/v1/thoughts/{thought_id}/process``)
rather than by raw path, so thought and job ids never become label values.
Unmatched paths share the ``unmatched`` label.
"""

import time
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from shared.observability.metrics import (
    http_request_duration_seconds,
    http_requests_in_progress,
    http_requests_total,
)

UNMATCHED_ROUTE = "unmatched"
EXCLUDED_PATHS = frozenset({"/metrics"})


def route_template(request: Request) -> str:
    """Route path template of a request, once routing has matched it."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or UNMATCHED_ROUTE


class MetricsMiddleware(BaseHTTPMiddleware):
    """Counts requests and observes latency per service, method and route."""

    def __init__(self, app: Any, service_name: str):
        super().__init__(app)
        self.service_name = service_name

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        if request.url.path in EXCLUDED_PATHS:
            return await call_next(request)

        method = request.method
        in_progress = http_requests_in_progress.labels(service=self.service_name, method=method)
        in_progress.inc()
        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            in_progress.dec()
            endpoint = route_template(request)
            http_requests_total.labels(
                service=self.service_name,
                method=method,
                endpoint=endpoint,
                status_code=status_code,
            ).inc()
            http_request_duration_seconds.labels(
                service=self.service_name, method=method, endpoint=endpoint
            ).observe(time.perf_counter() - started)
