"""HTTP middleware for metrics and error tracking context."""

from docvault.middleware.metrics_middleware import MetricsMiddleware
from docvault.middleware.sentry_middleware import SentryContextMiddleware

__all__ = ["MetricsMiddleware", "SentryContextMiddleware"]
