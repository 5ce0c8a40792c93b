"""Global exception handlers for the FastAPI application.

Every error leaves the API in the same envelope the frontend already understands:

    {"success": false, "message": "...", "error": "..."}

"error" carries the underlying detail and is only added when ENVIRONMENT=development.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from riffus.domain.exceptions import NotFoundError, UpstreamError, ValidationError
from riffus.infrastructure.observability.logging import get_correlation_id
from riffus.infrastructure.observability.middleware import CORRELATION_HEADER

logger = logging.getLogger(__name__)

SONG_NOT_FOUND = "Song not found"
UPSTREAM_FAILED = "Upstream service request failed"
INTERNAL_ERROR = "Internal server error"


def _is_development(request: Request) -> bool:
    settings = getattr(request.app.state, "settings", None)
    return bool(settings is not None and settings.is_development)


def error_response(
    request: Request,
    status_code: int,
    message: str,
    detail: BaseException | None = None,
) -> JSONResponse:
    """Build the error envelope.

    Args:
        request: Current request (settings are read from app.state)
        status_code: HTTP status
        message: Client-facing message
        detail: Underlying exception, exposed as "error" in development only

    Returns:
        JSON response with success=false
    """
    content: dict[str, Any] = {"success": False, "message": message}
    if detail is not None and _is_development(request):
        content["error"] = getattr(detail, "message", None) or str(detail)
    return JSONResponse(status_code=status_code, content=content)


def _first_validation_message(exc: RequestValidationError) -> str:
    errors = list(exc.errors())
    if not errors:
        return "Invalid request"
    first = errors[0]
    # loc looks like ("query", "limit") or ("body", "trackId")
    field = ".".join(str(part) for part in first.get("loc", ())[1:]) or "request"
    return f"Invalid {field}: {first.get('msg', 'invalid value')}"


# Hey future me, register these BEFORE the app serves anything (create_app does). Routers raise
# HTTPException(500, "Failed to ...") from the UpstreamError so each endpoint keeps its own
# message; the UpstreamError handler below only catches what slips through without one.
def register_exception_handlers(app: FastAPI) -> None:
    """Register handlers for domain, HTTP, validation and unexpected exceptions."""

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
        """Handle domain validation errors with 400 Bad Request."""
        logger.warning(
            "Validation error at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path, "error": exc.message},
        )
        return error_response(request, status.HTTP_400_BAD_REQUEST, exc.message)

    @app.exception_handler(NotFoundError)
    async def not_found_error_handler(request: Request, exc: NotFoundError) -> JSONResponse:
        """Handle missing songs with 404 Not Found."""
        logger.info(
            "Not found at %s: %s %s",
            request.url.path,
            exc.entity_type,
            exc.entity_id,
            extra={
                "path": request.url.path,
                "entity_type": exc.entity_type,
                "entity_id": str(exc.entity_id),
            },
        )
        return error_response(request, status.HTTP_404_NOT_FOUND, SONG_NOT_FOUND)

    @app.exception_handler(UpstreamError)
    async def upstream_error_handler(request: Request, exc: UpstreamError) -> JSONResponse:
        """Handle provider failures with 500 and a generic message."""
        logger.error(
            "Upstream error at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path, "provider": exc.provider, "error": exc.message},
        )
        return error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, UPSTREAM_FAILED, exc)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Render HTTP exceptions in the error envelope."""
        log = logger.error if exc.status_code >= 500 else logger.info
        log(
            "HTTP error %d at %s: %s",
            exc.status_code,
            request.url.path,
            exc.detail,
            extra={"path": request.url.path, "status_code": exc.status_code},
        )
        response = error_response(request, exc.status_code, str(exc.detail), exc.__cause__)
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle malformed query/body parameters with 400 Bad Request."""
        message = _first_validation_message(exc)
        logger.warning(
            "Request validation error at %s: %s",
            request.url.path,
            message,
            extra={"path": request.url.path},
        )
        return error_response(request, status.HTTP_400_BAD_REQUEST, message)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Last resort: log with traceback, answer 500."""
        logger.exception(
            "Unhandled error on %s %s",
            request.method,
            request.url.path,
            extra={"path": request.url.path, "error_type": type(exc).__name__},
        )
        response = error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR, exc)
        # This handler runs outside the logging middleware, so echo the id here
        correlation_id = get_correlation_id()
        if correlation_id:
            response.headers[CORRELATION_HEADER] = correlation_id
        return response
