"""
Custom middleware and exception handlers for the FastAPI application.
"""
import time
import logging
import traceback
from typing import Callable

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from journal_portal.core.config import settings
from journal_portal.core.error_handling import ApplicationError, ErrorCategory, get_status_code
from journal_portal.core.logging_config import (
    clear_request_context,
    generate_request_id,
    performance_logger,
    set_request_context,
)
from journal_portal.core.response_formatter import ResponseFormatter

logger = logging.getLogger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for request and response logging."""

    def __init__(self, app: ASGIApp):
        super().__init__(app)
        self.sensitive_headers = {
            "authorization", "cookie", "x-api-key", "x-auth-token"
        }

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()
        request_id = getattr(request.state, 'request_id', 'unknown')
        client_ip = request.client.host if request.client else 'unknown'

        logger.info(
            f"Request [{request_id}]: {request.method} {request.url.path} "
            f"from {client_ip} | Content-Length: {request.headers.get('content-length', '0')}"
        )

        if request.query_params:
            logger.debug(f"Query params [{request_id}]: {dict(request.query_params)}")

        if logger.isEnabledFor(logging.DEBUG):
            safe_headers = {
                k: v if k.lower() not in self.sensitive_headers else "[REDACTED]"
                for k, v in request.headers.items()
            }
            logger.debug(f"Headers [{request_id}]: {safe_headers}")

        response = await call_next(request)

        process_time = time.time() - start_time

        if response.status_code >= 500:
            log_level = logging.ERROR
        elif response.status_code >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            f"Response [{request_id}]: {response.status_code} "
            f"for {request.method} {request.url.path} | "
            f"Time: {process_time:.4f}s"
        )
        performance_logger.log_operation(
            f"{request.method} {request.url.path}",
            duration_ms=process_time * 1000,
            status=str(response.status_code)
        )

        response.headers["X-Process-Time"] = f"{process_time:.4f}"

        if process_time > 1.0:
            logger.warning(
                f"Slow request [{request_id}]: {request.method} {request.url.path} "
                f"took {process_time:.4f}s"
            )

        return response


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Assigns request ids and turns unhandled exceptions into 500 responses."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = generate_request_id()
        request.state.request_id = request_id
        set_request_context(request_id=request_id)

        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response

        except Exception as e:
            logger.error(
                f"Unexpected error [{request_id}]: {e} "
                f"for {request.method} {request.url.path}",
                exc_info=True
            )
            if settings.is_production:
                return ResponseFormatter.internal_error(headers={"X-Request-ID": request_id})
            return ResponseFormatter.internal_error(
                error=str(e),
                stack=traceback.format_exc(),
                headers={"X-Request-ID": request_id}
            )
        finally:
            clear_request_context()


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware for adding security headers."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-XSS-Protection"] = "1; mode=block"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        if request.url.scheme == "https":
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        return response


async def application_error_handler(request: Request, exc: ApplicationError) -> Response:
    headers = {"X-Error-ID": exc.error_id}
    if exc.category == ErrorCategory.AUTHENTICATION:
        headers["WWW-Authenticate"] = "Bearer"

    return ResponseFormatter.error(
        message=exc.message,
        error_code=exc.error_code,
        status_code=get_status_code(exc),
        details=exc.details or None,
        headers=headers
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> Response:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    if exc.status_code >= 500 and settings.is_production:
        message = "Internal server error"
    return ResponseFormatter.error(
        message=message,
        error_code=f"HTTP_{exc.status_code}",
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None)
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> Response:
    return ResponseFormatter.validation_error(
        message="Validation failed",
        details={"errors": exc.errors()}
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Render every handled error in the standard envelope."""
    app.add_exception_handler(ApplicationError, application_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)


def setup_middleware(app: FastAPI) -> None:
    """Set up all middleware for the application."""
    # Last added runs first: security headers wrap error handling, which
    # assigns the request id before the logging middleware reads it.
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)

    logger.info("Middleware setup completed")
