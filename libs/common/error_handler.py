"""Global exception handlers mapping failures onto the response envelope."""

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from libs.common.config import get_settings
from libs.common.logging import get_logger
from libs.common.responses import error_body

logger = get_logger(__name__)


def format_validation_errors(errors) -> list[str]:
    """Flatten pydantic error dicts into readable per-field messages."""
    messages = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(loc)
        msg = err.get("msg", "Invalid value")
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        messages.append(f"{field}: {msg}" if field else msg)
    return messages


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(
            str(exc.detail), errors=getattr(exc, "errors", None)
        ),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(
            "Validation error", errors=format_validation_errors(exc.errors())
        ),
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning("Unique constraint violated: %s", exc.orig)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("Duplicate field error"),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    settings = get_settings()
    detail = "Something went wrong" if settings.is_production else str(exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("Internal server error", error=detail),
    )


def add_exception_handlers(app: FastAPI) -> None:
    """Register the envelope-producing handlers on an app."""
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
