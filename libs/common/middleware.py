"""Per-request access logging for the storefront API.

Each request gets an id (taken from ``X-Request-ID`` when the caller sends
one) that is echoed back on the response and stamped on every log record
emitted while the request is handled. One access line is written per
request, carrying the matched route template rather than the raw path so
product and user ids do not fragment the logs.
"""
import time
from typing import Callable, Optional

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from libs.common.logging import (
    clear_request_context,
    configure_logging,
    get_logger,
    set_request_context,
)
from libs.common.rate_limit import client_ip

logger = get_logger("storefront.access")

HEALTH_PATHS = frozenset({"/health", "/api/health"})


def route_template(request: Request) -> str:
    """``/api/products/{product_id}`` for a matched route, else the raw path."""
    route = request.scope.get("route")
    return getattr(route, "path_format", None) or request.url.path


def _caller_id(request: Request) -> Optional[str]:
    # Set by the auth dependency once a token resolves to an active account
    return getattr(request.state, "user_id", None)


def _access_fields(request: Request, status_code: int, started: float) -> dict:
    return {
        "route": route_template(request),
        "status_code": status_code,
        "duration_ms": round((time.perf_counter() - started) * 1000, 2),
        "user_id": _caller_id(request),
        "client_ip": client_ip(request),
    }


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Tags the request with an id and writes its access log line.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = set_request_context(
            request_id=request.headers.get("X-Request-ID"),
            path=request.url.path,
            method=request.method,
        )
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "Unhandled error",
                extra={"extra_fields": _access_fields(request, 500, started)},
            )
            raise
        else:
            response.headers["X-Request-ID"] = request_id
            if request.url.path not in HEALTH_PATHS:
                fields = _access_fields(request, response.status_code, started)
                level = "warning" if response.status_code >= 400 else "info"
                getattr(logger, level)(
                    "%s %s %s%s",
                    request.method,
                    fields["route"],
                    response.status_code,
                    " (access denied)" if response.status_code in (401, 403) else "",
                    extra={"extra_fields": fields},
                )
            return response
        finally:
            clear_request_context()


def add_observability_middleware(app: FastAPI) -> None:
    """
    Configure logging and install the access-log middleware.
    """
    configure_logging()
    app.add_middleware(RequestContextMiddleware)
