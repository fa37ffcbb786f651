"""Unified error handling for Snapgram API."""

import traceback
from typing import Any

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from .exceptions import ServiceError, SnapgramError
from .logging import ContextLogger
from .settings import settings

logger = ContextLogger(__name__)

NOT_FOUND_MESSAGE = "404 Page Not Found!"
NOT_FOUND_HTML = """<!DOCTYPE html>
<html lang="en">
<head><meta charset="UTF-8"><title>404</title></head>
<body><h1>404 Page Not Found!</h1></body>
</html>
"""


class ErrorResponse:
    """Standardized error response structure."""

    @staticmethod
    def create_response(
        status_code: int,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
        correlation_id: str | None = None,
        include_traceback: bool = False,
        exception: Exception | None = None,
    ) -> JSONResponse:
        """Create standardized error response."""
        content: dict[str, Any] = {
            "error": True,
            "message": message,
            "error_code": error_code or "UNKNOWN_ERROR",
            "status_code": status_code,
        }

        if details:
            content["details"] = details

        if correlation_id:
            content["correlation_id"] = correlation_id

        if include_traceback and exception:
            content["traceback"] = traceback.format_exception(
                type(exception), exception, exception.__traceback__
            )

        return JSONResponse(status_code=status_code, content=content)


def _preferred_type(accept: str, offered: list[str]) -> str | None:
    """Pick the first offered media type the Accept header allows.

    Offered types are tried in order, so a wildcard or missing header picks
    the first one.
    """
    if not accept:
        return offered[0]

    ranges = []
    for part in accept.split(","):
        media, _, params = part.strip().partition(";")
        quality = 1.0
        for param in params.split(";"):
            key, _, value = param.strip().partition("=")
            if key == "q":
                try:
                    quality = float(value)
                except ValueError:
                    quality = 0.0
        if quality > 0:
            ranges.append(media.strip().lower())

    for candidate in offered:
        major = candidate.split("/")[0]
        for media in ranges:
            if media in (candidate, f"{major}/*", "*/*"):
                return candidate
    return None


async def snapgram_error_handler(request: Request, exc: SnapgramError) -> JSONResponse:
    """Handle all Snapgram-specific errors in a unified way."""
    correlation_id = getattr(request.state, "correlation_id", None)

    log_message = f"{exc.__class__.__name__}: {exc.message}"
    extra = {
        "error_code": exc.error_code,
        "exception_type": exc.__class__.__name__,
        "path": request.url.path,
    }

    if isinstance(exc, ServiceError):
        logger.error(log_message, extra=extra, exc_info=True)
    else:
        logger.warning(log_message, extra=extra)

    return ErrorResponse.create_response(
        status_code=exc.status_code,
        message=exc.message,
        error_code=exc.error_code,
        details=exc.details,
        correlation_id=correlation_id,
    )


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed request bodies as plain validation failures."""
    correlation_id = getattr(request.state, "correlation_id", None)
    errors = [
        {"loc": [str(part) for part in error.get("loc", ())], "msg": error.get("msg")}
        for error in exc.errors()
    ]
    logger.warning(
        "Request validation failed",
        extra={"path": request.url.path, "errors": errors},
    )
    return ErrorResponse.create_response(
        status_code=status.HTTP_400_BAD_REQUEST,
        message="Invalid request data!",
        error_code="ValidationError",
        details={"errors": errors},
        correlation_id=correlation_id,
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> Response:
    """Content-negotiate 404s; pass every other HTTP error through as JSON."""
    if exc.status_code != status.HTTP_404_NOT_FOUND:
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    chosen = _preferred_type(
        request.headers.get("accept", ""),
        ["text/html", "application/json", "text/plain"],
    )
    if chosen == "text/html":
        return HTMLResponse(NOT_FOUND_HTML, status_code=404)
    if chosen == "application/json":
        return JSONResponse({"message": NOT_FOUND_MESSAGE}, status_code=404)
    return PlainTextResponse(NOT_FOUND_MESSAGE, status_code=404)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    correlation_id = getattr(request.state, "correlation_id", None)

    logger.error(
        f"Unexpected error: {exc}",
        extra={
            "exception_type": exc.__class__.__name__,
            "path": request.url.path,
            "method": request.method,
        },
        exc_info=True,
    )

    include_traceback = settings.debug

    return ErrorResponse.create_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        message="Internal server error occurred",
        error_code="INTERNAL_SERVER_ERROR",
        correlation_id=correlation_id,
        include_traceback=include_traceback,
        exception=exc if include_traceback else None,
    )


def register_error_handlers(app) -> None:
    """Register all error handlers with the FastAPI app."""
    app.add_exception_handler(SnapgramError, snapgram_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
