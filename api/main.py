"""SomethingToDo API Service - Serverless FastAPI.

This is the main FastAPI application behind the SomethingToDo app: chat
assistant, event search proxy, event sync and recommendations.
Served as a Cloud Function through the WSGI bridge below and by uvicorn locally.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone

import structlog
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from a2wsgi import ASGIMiddleware

from api.errors import RateLimitedError, rate_limited_response, register_exception_handlers
from api.events_api import EventsSearchClient
from api.llm.chat_client import ChatCompletionClient
from api.middleware.cors import cors_options
from api.middleware.rate_limiter import RateLimiter
from api.models import HealthResponse
from api.routers import (
    chat as chat_router,
    events as events_router,
    recommendations as recommendations_router,
)
from libs.common.settings import Settings, get_settings, validate_environment


def configure_logging(log_level: str = "INFO") -> None:
    """Configure structured logging."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, log_level, logging.INFO))
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


logger = structlog.get_logger(__name__)


def create_app(settings: Settings | None = None, rate_limiter: RateLimiter | None = None) -> FastAPI:
    """Create and configure FastAPI application for serverless deployment."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    validate_environment(settings)

    app = FastAPI(
        title="SomethingToDo API",
        description="Event discovery backend: chat assistant, event search and recommendations",
        version=settings.version,
        default_response_class=ORJSONResponse,
        debug=settings.debug,
        # No lifespan for serverless - clients are created per request
    )

    app.state.settings = settings
    app.state.rate_limiter = rate_limiter or RateLimiter.from_settings(settings)
    app.state.chat_client = ChatCompletionClient.from_settings(settings)
    app.state.events_client = EventsSearchClient.from_settings(settings)

    register_exception_handlers(app)

    # Middleware added last runs first: CORS, logging, size limit, rate limit.
    @app.middleware("http")
    async def rate_limit(request: Request, call_next):
        """Admit or reject every request against the caller's window."""
        try:
            await request.app.state.rate_limiter.check_rate_limit(request)
        except RateLimitedError as e:
            return rate_limited_response(e.retry_after)
        return await call_next(request)

    @app.middleware("http")
    async def limit_request_size(request: Request, call_next):
        """Limit request body size to prevent abuse."""
        max_size = settings.max_request_bytes

        if request.method in ["POST", "PUT", "PATCH"]:
            content_length = request.headers.get("content-length")
            if content_length and content_length.isdigit() and int(content_length) > max_size:
                return ORJSONResponse(
                    status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                    content={"error": f"Request body too large. Maximum size: {max_size} bytes"},
                )

        return await call_next(request)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log all requests with timing and structured data."""
        start_time = time.time()
        request_id = f"req_{int(start_time * 1000000)}"

        request.state.request_id = request_id

        logger.info(
            "Request started",
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            user_agent=request.headers.get("user-agent"),
        )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request failed",
                request_id=request_id,
                error=str(e),
                process_time_ms=round((time.time() - start_time) * 1000, 2),
                exc_info=True,
            )
            raise

        logger.info(
            "Request completed",
            request_id=request_id,
            status_code=response.status_code,
            process_time_ms=round((time.time() - start_time) * 1000, 2),
        )

        response.headers["X-Request-ID"] = request_id
        return response

    app.add_middleware(CORSMiddleware, **cors_options(settings))

    app.include_router(chat_router.router, tags=["Chat"])
    app.include_router(events_router.router, tags=["Events"])
    app.include_router(recommendations_router.router, tags=["Recommendations"])

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> HealthResponse:
        """Health check endpoint for liveness probes.

        Example:
            ```bash
            curl http://localhost:8000/health
            ```
        """
        return HealthResponse(
            status="healthy",
            timestamp=datetime.now(timezone.utc).isoformat(),
            version=settings.version,
        )

    return app


# Create the FastAPI app
app = create_app()

# Cloud Functions hand over WSGI requests; main.api serves them through this bridge
wsgi_app = ASGIMiddleware(app)

if __name__ == "__main__":
    import uvicorn

    # For local development only
    uvicorn.run(
        "api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info",
    )
