"""
Error handling hooks and utilities for Parley.

Installs FastAPI exception handlers so that every route answers failures
with the same JSON shape, and provides a consistent error logger.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .codes import ErrorCode
from .exceptions import ParleyError, ValidationError
from .response import error_response, status_for

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    """Map ParleyError (and anything unexpected) to JSON error responses.

    Validation failures (including malformed request bodies) become 400,
    configuration/provider/internal failures 500, store failures 502.
    """

    @app.exception_handler(ParleyError)
    async def _parley_error_handler(request: Request, exc: ParleyError) -> JSONResponse:
        log_error(logger, exc, context=request.url.path, include_traceback=exc.http_status >= 500)
        return JSONResponse(status_code=status_for(exc), content=error_response(exc))

    @app.exception_handler(RequestValidationError)
    async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        first = exc.errors()[0] if exc.errors() else {}
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        error = ValidationError(
            f"Invalid request: {field or 'body'} {first.get('msg', 'is invalid')}".strip(),
            code=ErrorCode.VALIDATION_INVALID_FORMAT,
            parameter=field or None,
        )
        log_error(logger, error, context=request.url.path, include_traceback=False)
        return JSONResponse(status_code=400, content=error_response(error))

    @app.exception_handler(Exception)
    async def _unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        log_error(logger, exc, context=request.url.path)
        return JSONResponse(status_code=500, content=error_response(exc))


def log_error(
    logger: logging.Logger, error: Exception, context: Optional[str] = None, include_traceback: bool = True
) -> None:
    """Log an error with consistent formatting.

    Args:
        logger: Logger instance to use
        error: The exception to log
        context: Optional context string to prefix the message
        include_traceback: Whether to include the full stack trace

    Example:
        >>> log_error(logger, err, context="/api/chat")
        # Logs: "[/api/chat] PROVIDER_UNAVAILABLE: Claude request failed"
    """
    if isinstance(error, ParleyError):
        message = f"{error.code.value}: {error.message}"
    else:
        message = str(error)

    if context:
        message = f"[{context}] {message}"

    logger.error(message, exc_info=include_traceback)
