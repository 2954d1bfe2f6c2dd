"""
Exception handlers mapping the error taxonomy onto HTTP responses.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from shared.config.logging import get_logger
from shared.exceptions import (
    FAILED_PRECONDITION,
    INVALID_ARGUMENT,
    NOT_FOUND,
    PERMISSION_DENIED,
    RESOURCE_EXHAUSTED,
    UNAUTHENTICATED,
    FocusQueueError,
    RateLimitExceeded,
)
from shared.schemas.base import ErrorResponse

logger = get_logger(__name__)

STATUS_BY_ERROR_CODE = {
    UNAUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    INVALID_ARGUMENT: status.HTTP_400_BAD_REQUEST,
    NOT_FOUND: status.HTTP_404_NOT_FOUND,
    FAILED_PRECONDITION: status.HTTP_412_PRECONDITION_FAILED,
    PERMISSION_DENIED: status.HTTP_403_FORBIDDEN,
    RESOURCE_EXHAUSTED: status.HTTP_429_TOO_MANY_REQUESTS,
}


def status_for(error: FocusQueueError) -> int:
    """HTTP status for an error's taxonomy code (500 for anything else)."""
    return STATUS_BY_ERROR_CODE.get(error.error_code, status.HTTP_500_INTERNAL_SERVER_ERROR)


async def handle_focusqueue_error(request: Request, exc: FocusQueueError) -> JSONResponse:
    """Render a FocusQueueError as an ErrorResponse."""
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error("request_failed", path=request.url.path, error=exc.message, exc_info=exc)
        body = ErrorResponse(error="Internal error", error_code="internal")
    else:
        body = ErrorResponse(error=exc.message, error_code=exc.error_code, details=exc.details or None)

    headers = {}
    if isinstance(exc, RateLimitExceeded) and exc.retry_after is not None:
        headers["Retry-After"] = str(max(1, int(exc.retry_after)))

    return JSONResponse(status_code=status_code, content=body.model_dump(), headers=headers)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    """Render an unexpected exception as a 500 ErrorResponse."""
    logger.error("request_failed", path=request.url.path, error=str(exc), exc_info=exc)
    body = ErrorResponse(error="Internal error", error_code="internal")
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body.model_dump())


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the taxonomy handlers to an application."""
    app.add_exception_handler(FocusQueueError, handle_focusqueue_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
