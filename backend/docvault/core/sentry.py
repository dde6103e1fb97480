"""
Sentry Integration Module.

Configures Sentry for error tracking and performance monitoring.
Initialisation is a no-op when no DSN is configured.
"""

import logging
from typing import Any, Dict, Optional

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.integrations.pymongo import PyMongoIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration

from docvault.config import settings

logger = logging.getLogger(__name__)

IGNORED_EXCEPTIONS = (
    "ConnectionResetError",
    "BrokenPipeError",
    "ClientDisconnected",
)

IGNORED_TRANSACTIONS = (
    "/health",
    "/metrics",
    "/favicon.ico",
)

SENSITIVE_HEADERS = ("authorization", "cookie", "x-api-key")


def init_sentry(
    dsn: Optional[str] = None,
    environment: Optional[str] = None,
    traces_sample_rate: Optional[float] = None,
) -> bool:
    """
    Initialize the Sentry SDK.

    Args:
        dsn: Sentry DSN. Falls back to settings.SENTRY_DSN.
        environment: Environment name. Falls back to settings.ENVIRONMENT.
        traces_sample_rate: Transaction sample rate.

    Returns:
        bool: True if Sentry was initialized.
    """
    sentry_dsn = dsn or settings.SENTRY_DSN
    if not sentry_dsn:
        logger.warning("Sentry DSN not configured. Error tracking disabled.")
        return False

    env = environment or settings.ENVIRONMENT

    sentry_sdk.init(
        dsn=sentry_dsn,
        environment=env,
        release=f"docvault-backend@{settings.APP_VERSION}",
        traces_sample_rate=(
            settings.SENTRY_TRACES_SAMPLE_RATE
            if traces_sample_rate is None
            else traces_sample_rate
        ),
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            StarletteIntegration(transaction_style="endpoint"),
            PyMongoIntegration(),
            LoggingIntegration(level=logging.WARNING, event_level=logging.ERROR),
        ],
        send_default_pii=False,
        before_send=before_send_handler,
        before_send_transaction=before_send_transaction_handler,
        attach_stacktrace=True,
        max_breadcrumbs=50,
    )

    logger.info(f"Sentry initialized for environment: {env}")
    return True


def before_send_handler(event: Dict[str, Any], hint: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Drop client disconnect noise and scrub credentials from request headers."""
    if "exc_info" in hint:
        exc_type = hint["exc_info"][0]
        if exc_type.__name__ in IGNORED_EXCEPTIONS:
            return None

    if "request" in event:
        headers = event["request"].get("headers", {})
        for header in SENSITIVE_HEADERS:
            if header in headers:
                headers[header] = "[Filtered]"

    return event


def before_send_transaction_handler(
    event: Dict[str, Any],
    hint: Dict[str, Any],
) -> Optional[Dict[str, Any]]:
    """Drop transactions for health checks and the metrics scrape."""
    transaction_name = event.get("transaction", "")
    for endpoint in IGNORED_TRANSACTIONS:
        if endpoint in transaction_name:
            return None
    return event


def capture_exception(
    error: Exception,
    context: Optional[Dict[str, Any]] = None,
    tags: Optional[Dict[str, str]] = None,
) -> Optional[str]:
    """
    Capture an exception with additional context.

    Returns:
        Sentry event ID if captured, None otherwise.
    """
    with sentry_sdk.new_scope() as scope:
        for key, value in (context or {}).items():
            scope.set_context(key, value)
        for key, value in (tags or {}).items():
            scope.set_tag(key, value)
        return sentry_sdk.capture_exception(error)


def set_user_context(user_id: Optional[str] = None, role: Optional[str] = None) -> None:
    """Attach the authenticated user to subsequent events."""
    sentry_sdk.set_user({"id": user_id})
    if role:
        sentry_sdk.set_tag("user.role", role)


def add_breadcrumb(
    message: str,
    category: str = "custom",
    level: str = "info",
    data: Optional[Dict[str, Any]] = None,
) -> None:
    sentry_sdk.add_breadcrumb(
        message=message,
        category=category,
        level=level,
        data=data or {},
    )
