"""
Error handling for the FastAPI application.
Maps domain exceptions to HTTP responses and catches everything else.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from timekeep.domain.models.base import (
    DomainException,
    EntityNotFoundError,
    InvalidStateError,
    PermissionDeniedError,
    RateLimitExceeded,
    ReferentialConflictError,
    UpstreamError,
    ValidationError,
)
from timekeep.infrastructure.monitoring.security_log import SecurityEventType

logger = logging.getLogger(__name__)

GENERIC_UPSTREAM_MESSAGE = "A required service is temporarily unavailable. Please try again later."
GENERIC_INTERNAL_MESSAGE = "An unexpected error occurred"

# Free-text fields whose rejections go to the security log
LOGGED_INPUT_FIELDS = frozenset({"description", "comment"})

STATUS_BY_EXCEPTION = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (PermissionDeniedError, status.HTTP_403_FORBIDDEN),
    (EntityNotFoundError, status.HTTP_404_NOT_FOUND),
    (InvalidStateError, status.HTTP_409_CONFLICT),
    (ReferentialConflictError, status.HTTP_409_CONFLICT),
    (RateLimitExceeded, status.HTTP_429_TOO_MANY_REQUESTS),
    (UpstreamError, status.HTTP_502_BAD_GATEWAY),
)

ERROR_BY_STATUS = {
    status.HTTP_400_BAD_REQUEST: "validation_error",
    status.HTTP_401_UNAUTHORIZED: "unauthorized",
    status.HTTP_403_FORBIDDEN: "permission_denied",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
    status.HTTP_409_CONFLICT: "conflict",
    status.HTTP_413_REQUEST_ENTITY_TOO_LARGE: "payload_too_large",
}


def status_for(exc: DomainException) -> int:
    for exc_type, status_code in STATUS_BY_EXCEPTION:
        if isinstance(exc, exc_type):
            return status_code
    return status.HTTP_400_BAD_REQUEST


def error_body(error: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"error": error, "message": message}
    if details:
        body["details"] = details
    return body


def _log_security_event(request: Request, event_type: SecurityEventType, details: str) -> None:
    container = getattr(request.app.state, "container", None)
    if container is None:
        return
    container.security_log.log_event(
        event_type,
        details,
        user_id=getattr(request.state, "user_id", None),
        ip=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    """Translate the domain error taxonomy into JSON responses."""
    status_code = status_for(exc)
    headers = None
    details = None
    message = exc.message

    if isinstance(exc, PermissionDeniedError):
        _log_security_event(
            request, SecurityEventType.PERMISSION_DENIED, f"{request.method} {request.url.path}: {exc.message}"
        )
    elif isinstance(exc, RateLimitExceeded):
        details = {"reset_time": exc.reset_time, "retry_after_seconds": exc.retry_after_seconds}
        headers = {
            "Retry-After": str(exc.retry_after_seconds),
            "X-RateLimit-Limit": str(exc.limit),
            "X-RateLimit-Remaining": "0",
            "X-RateLimit-Reset": str(exc.reset_time // 1000),
        }
    elif isinstance(exc, UpstreamError):
        logger.error(f"Upstream failure ({exc.service}) on {request.method} {request.url.path}: {exc.message}")
        message = GENERIC_UPSTREAM_MESSAGE
    elif isinstance(exc, ValidationError) and exc.field:
        details = {"field": exc.field}
        if exc.field in LOGGED_INPUT_FIELDS:
            _log_security_event(
                request, SecurityEventType.INVALID_INPUT, f"{request.method} {request.url.path}: {exc.message}"
            )

    body = error_body(exc.code, message, details)
    if isinstance(exc, RateLimitExceeded):
        body.update(details)

    return JSONResponse(status_code=status_code, content=body, headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies and parameters are validation errors."""
    field_errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": error.get("msg", "Invalid value"),
        }
        for error in exc.errors()
    ]
    message = field_errors[0]["message"] if field_errors else "Invalid request"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("validation_error", message, {"field_errors": field_errors}),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    error = ERROR_BY_STATUS.get(exc.status_code, "http_error")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(error, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainException, domain_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Middleware to handle all uncaught exceptions and format error responses.
    """

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            # Log the full exception with traceback
            logger.error(
                f"Unhandled exception: {type(exc).__name__}: {exc}",
                exc_info=True,
                extra={
                    "request_path": request.url.path,
                    "request_method": request.method,
                    "client_host": request.client.host if request.client else None,
                },
            )
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=error_body("internal_error", GENERIC_INTERNAL_MESSAGE),
            )
