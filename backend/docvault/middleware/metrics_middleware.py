"""
Prometheus Metrics Middleware.

Tracks request count and latency for every endpoint.
"""

import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from docvault.core.metrics import track_http_request

UNMATCHED_ENDPOINT = "unmatched"


class MetricsMiddleware(BaseHTTPMiddleware):
    """Records request count, duration and status code per endpoint."""

    EXCLUDED_PATHS = {"/metrics", "/health"}

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
        finally:
            track_http_request(
                method=request.method,
                endpoint=route_template(request),
                status_code=status_code,
                duration_seconds=time.perf_counter() - start_time,
            )

        return response


def route_template(request: Request) -> str:
    """
    Label a request by the path template of the route that handled it.

    E.g., /api/v1/users/user_abc/role -> /api/v1/users/{external_id}/role.
    Requests that matched no route share one label.
    """
    route = request.scope.get("route")
    return getattr(route, "path", None) or UNMATCHED_ENDPOINT
