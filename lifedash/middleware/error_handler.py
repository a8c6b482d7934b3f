"""
Unified error handling for FastAPI.

Provides:
- Consistent JSON error bodies: {"error": {"message", "type"}, "request_id"}
- Status codes for domain errors (409 conflicts, 422 rejected data)
- Logging of unexpected exceptions with request context
- Request ID tracking
"""

import logging
import traceback
import uuid
from typing import Callable, Dict, Optional, Type

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from ..domain.errors import (
    AlreadyFinalizedError,
    DayClosedError,
    DomainError,
    HabitDataRejected,
    InvalidConfigurationError,
    InvalidRangeError,
)

logger = logging.getLogger(__name__)

# Most specific class first
DOMAIN_STATUS_CODES: Dict[Type[DomainError], int] = {
    AlreadyFinalizedError: 409,
    DayClosedError: 409,
    HabitDataRejected: 422,
    InvalidConfigurationError: 500,
    InvalidRangeError: 400,
}


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Middleware that catches all unhandled exceptions and returns
    consistent JSON error responses.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and handle any errors."""
        request_id = str(uuid.uuid4())[:8]

        # Add request ID to state for access in handlers
        request.state.request_id = request_id

        try:
            return await call_next(request)

        except HTTPException:
            # Let HTTP exceptions pass through to FastAPI's handler
            raise

        except Exception as e:
            logger.error(
                f"Unhandled exception [{request_id}]: {type(e).__name__}: {e}",
                exc_info=True,
                extra={
                    "request_id": request_id,
                    "path": request.url.path,
                    "method": request.method,
                },
            )
            return JSONResponse(
                status_code=500,
                content={
                    "error": {
                        "message": "Internal server error",
                        "type": "InternalError",
                    },
                    "request_id": request_id,
                },
            )


def get_error_response(
    error: Exception,
    request_id: Optional[str] = None,
    include_traceback: bool = False,
) -> dict:
    """
    Build a standard error response dict.

    Args:
        error: The exception that occurred
        request_id: Optional request ID for tracking
        include_traceback: Whether to include full traceback (dev only)

    Returns:
        Error response dictionary
    """
    response = {
        "error": {
            "message": str(error),
            "type": type(error).__name__,
        },
    }

    if isinstance(error, HabitDataRejected):
        response["error"]["habit_id"] = error.habit_id
        response["error"]["reasons"] = error.reasons

    if request_id:
        response["request_id"] = request_id

    if include_traceback:
        response["error"]["traceback"] = traceback.format_exc()

    return response


def status_code_for(error: DomainError) -> int:
    for error_type, status_code in DOMAIN_STATUS_CODES.items():
        if isinstance(error, error_type):
            return status_code
    return 400


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    status_code = status_code_for(exc)
    request_id = getattr(request.state, "request_id", None)
    if status_code >= 500:
        logger.error(f"Domain error [{request_id}]: {type(exc).__name__}: {exc}")
    else:
        logger.info(f"Request rejected [{request_id}]: {type(exc).__name__}: {exc}")
    return JSONResponse(
        status_code=status_code, content=get_error_response(exc, request_id)
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
