"""
Rate limiting configuration for API abuse prevention.

Uses slowapi to implement rate limiting on FastAPI endpoints.
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from docvault.config import settings


def get_real_client_ip(request: Request) -> str:
    """
    Get the real client IP address, handling proxies.

    Args:
        request: FastAPI request object

    Returns:
        str: Client IP address
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # X-Forwarded-For can contain multiple IPs, take the first one
        return forwarded.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    return get_remote_address(request)


limiter = Limiter(key_func=get_real_client_ip, enabled=settings.RATE_LIMIT_ENABLED)


RATE_LIMITS = {
    # Uploads compress the whole file in memory
    "upload": "10/minute",

    # Views and downloads stream from GridFS
    "download": "60/minute",

    # Identity provider callbacks
    "webhook": "120/minute",

    # General API calls
    "default": "100/minute",
}


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """
    Custom handler for rate limit exceeded errors.

    Returns:
        JSONResponse: 429 error body, with Retry-After when known
    """
    response = JSONResponse(
        status_code=429,
        content={
            "error": "rate_limit_exceeded",
            "message": f"Rate limit exceeded: {exc.detail}",
            "detail": "Too many requests. Please try again later.",
        },
    )

    if hasattr(exc, "retry_after"):
        response.headers["Retry-After"] = str(exc.retry_after)

    return response
