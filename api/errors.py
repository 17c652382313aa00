"""Error taxonomy and JSON error envelopes.

Every handler maps failures to one of the errors below; the exception
handlers registered by ``register_exception_handlers`` render them as
``{"error": ..., "details": ...}``. Details are redacted and only sent
outside production.
"""

from __future__ import annotations

import re
from typing import Any

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException

from libs.common.settings import Settings, get_settings

logger = structlog.get_logger(__name__)

_TOKEN_PATTERN = re.compile(r"[A-Za-z0-9_-]{20,}")
_IPV4_PATTERN = re.compile(r"\b(?:\d{1,3}\.){3}\d{1,3}\b")


class APIError(Exception):
    """Base class for errors rendered as a JSON error envelope."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None, details: str | None = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class BadRequestError(APIError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid input"


class UnauthorizedError(APIError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class RateLimitedError(APIError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "Too many requests"

    def __init__(self, retry_after: int, message: str | None = None):
        super().__init__(message)
        self.retry_after = retry_after


class UpstreamUnavailableError(APIError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Service temporarily unavailable"


class InternalError(APIError):
    pass


def redact_details(details: str) -> str:
    """Strip token-like strings and IPv4 addresses from an error detail."""
    redacted = _TOKEN_PATTERN.sub("[REDACTED]", details)
    return _IPV4_PATTERN.sub("[IP]", redacted)


def error_content(message: str, details: str | None = None, settings: Settings | None = None) -> dict[str, Any]:
    """Build the error envelope, dropping details in production."""
    settings = settings or get_settings()
    content: dict[str, Any] = {"error": message}
    if details and not settings.is_production:
        content["details"] = redact_details(details)
    return content


def _settings_for(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or get_settings()


def rate_limited_response(retry_after: int) -> ORJSONResponse:
    return ORJSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={"error": RateLimitedError.default_message, "retryAfter": retry_after},
        headers={"Retry-After": str(retry_after)},
    )


async def api_error_handler(request: Request, exc: APIError) -> ORJSONResponse:
    if isinstance(exc, RateLimitedError):
        return rate_limited_response(exc.retry_after)

    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthorizedError) else None
    return ORJSONResponse(
        status_code=exc.status_code,
        content=error_content(exc.message, exc.details, _settings_for(request)),
        headers=headers,
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> ORJSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return ORJSONResponse(
        status_code=exc.status_code,
        content={"error": message},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> ORJSONResponse:
    logger.info("Request validation failed", path=request.url.path, errors=len(exc.errors()))
    return ORJSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": BadRequestError.default_message},
    )


async def generic_exception_handler(request: Request, exc: Exception) -> ORJSONResponse:
    logger.error(
        "Unhandled exception",
        path=request.url.path,
        error_type=type(exc).__name__,
        exc_info=exc,
    )
    return ORJSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_content(InternalError.default_message, str(exc), _settings_for(request)),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register the error envelope handlers on the app."""
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
