"""
Error handling middleware with security-compliant error sanitization.
Turns service errors into {"message", "tech_info"} responses and keeps
unexpected failure details in the server log only.
"""

import logging
import re
from typing import Callable, Optional
from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import SQLAlchemyError, IntegrityError, OperationalError

from core.errors import ErrorKind, ServiceError

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"

# Patterns for sensitive data that should never be returned or logged
SENSITIVE_PATTERNS = [
    re.compile(r'password["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'token["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'api[_-]?key["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'secret["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'authorization["\s:]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'(postgres(?:ql)?(?:\+\w+)?://)[^@\s]+@', re.IGNORECASE),
]


def sanitize_error_message(message: str) -> str:
    """
    Remove sensitive information from error messages.

    Args:
        message: Original error message

    Returns:
        Sanitized error message
    """
    sanitized = message
    for pattern in SENSITIVE_PATTERNS:
        sanitized = pattern.sub('[REDACTED]', sanitized)
    return sanitized


def error_body(message: str, tech_info: Optional[str] = None) -> dict[str, str]:
    body = {"message": message}
    if tech_info:
        body["tech_info"] = tech_info
    return body


def format_validation_errors(exc: RequestValidationError) -> str:
    """One line describing every validation problem, without input values."""
    parts = []
    for error in exc.errors():
        location = ".".join(str(loc) for loc in error["loc"] if loc != "body")
        message = sanitize_error_message(str(error["msg"]))
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts)


def service_error_response(exc: ServiceError) -> JSONResponse:
    headers = None
    if exc.kind == ErrorKind.UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.message, exc.tech_info),
        headers=headers,
    )


class ErrorHandlingMiddleware:
    """
    Last line of defense for errors escaping the exception handlers.

    Features:
    - Maps service errors and database errors to status codes
    - Sanitizes error messages to prevent sensitive data leakage
    - Never sends internal details to the client in production
    """

    def __init__(self, app: Callable, debug: bool = False):
        """
        Initialize error handling middleware.

        Args:
            app: The ASGI application
            debug: Whether to include sanitized error details in tech_info
        """
        self.app = app
        self.debug = debug

    async def __call__(self, scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        try:
            await self.app(scope, receive, send)
        except Exception as exc:
            response = self._handle_exception(exc, scope)
            await response(scope, receive, send)

    def _handle_exception(self, exc: Exception, scope: dict) -> Response:
        """
        Handle different types of exceptions and return appropriate responses.

        Args:
            exc: The exception to handle
            scope: ASGI scope for context

        Returns:
            JSONResponse with error details
        """
        request_path = scope.get("path", "unknown")
        request_method = scope.get("method", "unknown")

        if isinstance(exc, ServiceError):
            logger.info(
                f"Service error: {request_method} {request_path} - {exc.kind.value}: {exc.message}"
            )
            return service_error_response(exc)

        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        message = INTERNAL_ERROR_MESSAGE
        tech_info = None

        if isinstance(exc, StarletteHTTPException):
            status_code = exc.status_code
            message = sanitize_error_message(str(exc.detail))

        elif isinstance(exc, RequestValidationError):
            status_code = status.HTTP_400_BAD_REQUEST
            message = "invalid format"
            tech_info = format_validation_errors(exc)

        elif isinstance(exc, IntegrityError):
            status_code = status.HTTP_409_CONFLICT
            message = "duplication"
            logger.error(
                f"Database integrity error: {request_method} {request_path}",
                exc_info=True,
            )

        elif isinstance(exc, OperationalError):
            status_code = status.HTTP_503_SERVICE_UNAVAILABLE
            message = "Database service temporarily unavailable"
            logger.error(
                f"Database operational error: {request_method} {request_path}",
                exc_info=True,
            )

        elif isinstance(exc, SQLAlchemyError):
            logger.error(
                f"SQLAlchemy error: {request_method} {request_path}",
                exc_info=True,
            )

        elif isinstance(exc, TimeoutError):
            status_code = status.HTTP_504_GATEWAY_TIMEOUT
            message = "The request timed out"
            logger.error(f"Timeout error: {request_method} {request_path}")

        else:
            logger.error(
                f"Unhandled exception: {request_method} {request_path} - "
                f"{type(exc).__name__}: {sanitize_error_message(str(exc))}",
                exc_info=True,
            )

        if self.debug and tech_info is None and status_code >= 500:
            tech_info = f"{type(exc).__name__}: {sanitize_error_message(str(exc))}"

        return JSONResponse(
            status_code=status_code,
            content=error_body(message, tech_info),
        )


def setup_error_handlers(app, debug: bool = False):
    """
    Set up exception handlers for FastAPI application.

    Args:
        app: FastAPI application instance
        debug: Put sanitized exception text into tech_info of 500 responses
    """

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        """Handle classified service errors."""
        if exc.status_code >= 500:
            logger.error(f"Service error: {request.method} {request.url.path} - {exc!r}")
        return service_error_response(exc)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle HTTP exceptions."""
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(sanitize_error_message(str(exc.detail))),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Malformed bodies and parameters."""
        details = format_validation_errors(exc)
        logger.info(f"Invalid request: {request.method} {request.url.path} - {details}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body("invalid format", details),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        """Handle all other exceptions."""
        logger.error(
            f"Unhandled exception: {request.method} {request.url.path} - "
            f"{type(exc).__name__}: {sanitize_error_message(str(exc))}",
            exc_info=True,
        )
        tech_info = None
        if debug:
            tech_info = f"{type(exc).__name__}: {sanitize_error_message(str(exc))}"
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body(INTERNAL_ERROR_MESSAGE, tech_info),
        )
