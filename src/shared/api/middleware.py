"""
Shared API Middleware
======================

Request tracing, request logging and the mapping of the application
exception taxonomy onto HTTP responses.
"""

import time
import uuid
from datetime import datetime, timezone
from typing import Callable, Optional

from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from src.core import (
    ApplicationException,
    ConfigUnavailableException,
    DomainException,
    InvalidTransitionException,
    ResourceNotFoundException,
    ValidationException,
)
from src.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"

# Most specific first
_STATUS_BY_EXCEPTION = (
    (InvalidTransitionException, status.HTTP_409_CONFLICT),
    (ResourceNotFoundException, status.HTTP_404_NOT_FOUND),
    (ValidationException, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (ConfigUnavailableException, status.HTTP_503_SERVICE_UNAVAILABLE),
    (DomainException, status.HTTP_400_BAD_REQUEST),
)


def _correlation_id(request: Request) -> str:
    return getattr(request.state, "correlation_id", "unknown")


def _request_context(request: Request) -> dict:
    return {
        "correlation_id": _correlation_id(request),
        "method": request.method,
        "path": request.url.path,
    }


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """
    Tags every request with a correlation id.

    An incoming ``X-Correlation-ID`` is reused, otherwise one is generated;
    either way it is echoed on the response.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        request.state.correlation_id = correlation_id

        response = await call_next(request)
        response.headers[CORRELATION_HEADER] = correlation_id
        return response


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs request start, completion and failure with latency."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        context = _request_context(request)
        start_time = time.perf_counter()

        logger.info(
            "Request started",
            extra={**context, "client": request.client.host if request.client else None}
        )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request failed",
                extra={
                    **context,
                    "error": str(e),
                    "response_time_ms": int((time.perf_counter() - start_time) * 1000),
                }
            )
            raise

        logger.info(
            "Request completed",
            extra={
                **context,
                "status_code": response.status_code,
                "response_time_ms": int((time.perf_counter() - start_time) * 1000),
            }
        )
        return response


def error_response(
    request: Request,
    status_code: int,
    error_type: str,
    message: str,
    details: Optional[dict] = None,
) -> JSONResponse:
    """Uniform error body."""
    return JSONResponse(
        status_code=status_code,
        content={
            "error": error_type,
            "detail": message,
            "details": details or {},
            "correlation_id": _correlation_id(request),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
    )


async def application_exception_handler(request: Request, exc: ApplicationException) -> JSONResponse:
    """Map the exception taxonomy onto status codes."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for exception_type, code in _STATUS_BY_EXCEPTION:
        if isinstance(exc, exception_type):
            status_code = code
            break

    log = logger.error if status_code >= 500 else logger.warning
    log(
        "Request rejected",
        extra={
            **_request_context(request),
            "status_code": status_code,
            "error_type": type(exc).__name__,
            "error_message": exc.message,
        }
    )

    if status_code >= 500 and not isinstance(exc, ConfigUnavailableException):
        return error_response(request, status_code, type(exc).__name__, "Internal server error")
    return error_response(request, status_code, type(exc).__name__, exc.message, exc.details)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handler for anything the taxonomy does not cover.

    Internal details are only included in development.
    """
    logger.error(
        "Unhandled exception",
        extra={
            **_request_context(request),
            "error_type": type(exc).__name__,
            "error_message": str(exc),
        }
    )

    is_dev = getattr(getattr(request.app.state, "settings", None), "environment", None) == "development"
    return error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "InternalServerError",
        "Internal server error",
        {"debug_info": str(exc)} if is_dev else None,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApplicationException, application_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
