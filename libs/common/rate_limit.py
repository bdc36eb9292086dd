"""Rate limiting configuration for the storefront API.

Uses slowapi; state lives wherever RATE_LIMIT_STORAGE_URI points
(in-process memory by default, Redis in multi-instance deployments).
"""

from functools import lru_cache
from typing import Callable

from fastapi import Request, Response
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from libs.common.config import get_settings


def client_ip(request: Request) -> str:
    """
    Get client IP from request, preferring the first X-Forwarded-For hop.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return get_remote_address(request)


@lru_cache
def get_limiter() -> Limiter:
    """
    Create and return a cached Limiter instance.
    """
    settings = get_settings()

    return Limiter(
        key_func=client_ip,
        storage_uri=settings.RATE_LIMIT_STORAGE_URI,
        strategy="fixed-window",
        enabled=settings.RATE_LIMIT_ENABLED,
    )


limiter = get_limiter()


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """
    Return the standard error envelope with a Retry-After header.
    """
    retry_after = exc.detail.split("per")[0].strip() if exc.detail else "1 minute"

    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "message": f"Rate limit exceeded. Try again in {retry_after}.",
            "error": "RATE_LIMIT_EXCEEDED",
        },
        headers={
            "Retry-After": str(getattr(exc, "retry_after", 60)),
        },
    )


def auth_limit(func: Callable) -> Callable:
    """Apply strict rate limit for authentication endpoints (5/minute)."""
    return limiter.limit("5/minute")(func)
