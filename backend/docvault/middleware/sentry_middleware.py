"""
Sentry Context Middleware.

Adds request breadcrumbs and tags so captured errors carry the request
that produced them.
"""

from typing import Callable

import sentry_sdk
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from docvault.core.sentry import add_breadcrumb


class SentryContextMiddleware(BaseHTTPMiddleware):
    """Tags the current scope with request data and records a response breadcrumb."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        add_breadcrumb(
            message=f"{request.method} {request.url.path}",
            category="http",
            data={
                "method": request.method,
                "path": request.url.path,
                "query": str(request.query_params),
            },
        )

        scope = sentry_sdk.get_isolation_scope()
        scope.set_tag("request.method", request.method)
        scope.set_tag("request.path", request.url.path)

        response = await call_next(request)

        add_breadcrumb(
            message=f"Response: {response.status_code}",
            category="http",
            level="info" if response.status_code < 400 else "warning",
            data={"status_code": response.status_code},
        )
        return response
