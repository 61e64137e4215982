"""
Global error handlers for FastAPI application.

Implements secure error handling that:
- Never exposes stack traces or internal details to clients
- Logs full errors internally for debugging
- Returns consistent error responses carrying a machine-readable error_type
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from fileupload.errors import ErrorType, FileUploadError

logger = logging.getLogger(__name__)


def error_body(status_code: int, error_type: str, message) -> dict:
    return {
        "error": True,
        "status_code": status_code,
        "error_type": error_type,
        "message": message,
    }


def register_error_handlers(app: FastAPI) -> None:
    """
    Register global error handlers on the app.

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(FileUploadError)
    async def upload_error_handler(request: Request, exc: FileUploadError) -> JSONResponse:
        """
        Handle storage errors.

        - 4xx errors: Return the message (client errors are safe to expose)
        - 5xx errors: Log internally, return generic message
        """
        if exc.status_code >= 500:
            logger.error(
                "%s: %s | path=%s",
                exc.error_type.value,
                exc.message,
                request.url.path,
            )
            message = "Failed to store the uploaded file. Please try again later."
        else:
            logger.warning(
                "%s: %s | path=%s",
                exc.error_type.value,
                exc.message,
                request.url.path,
            )
            message = exc.message

        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.status_code, exc.error_type.value, message),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Malformed request bodies become 422 in the common envelope."""
        logger.warning("Request validation failed | path=%s", request.url.path)
        return JSONResponse(
            status_code=422,
            content=error_body(422, ErrorType.INVALID_PAYLOAD.value, "Request body is malformed"),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """Handle Starlette/FastAPI HTTPException (404s, 405s, etc.)"""
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(
                exc.status_code,
                "http_error",
                exc.detail if exc.status_code < 500 else "An internal error occurred",
            ),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """
        Catch-all handler for unhandled exceptions.

        NEVER expose internal error details to clients.
        Log the full stack trace internally for debugging.
        """
        logger.exception(
            "Unhandled exception | path=%s | type=%s",
            request.url.path,
            type(exc).__name__
        )

        return JSONResponse(
            status_code=500,
            content=error_body(
                500,
                ErrorType.INTERNAL_ERROR.value,
                "An unexpected error occurred. Please try again later.",
            ),
        )
