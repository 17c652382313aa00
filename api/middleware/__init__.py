"""API middleware for rate limiting, sanitization and CORS."""

from api.middleware.cors import cors_options
from api.middleware.rate_limiter import InMemoryRateLimitStore, RateLimiter
from api.middleware.sanitizer import sanitize_value, sanitized_body, sanitized_query

__all__ = [
    "InMemoryRateLimitStore",
    "RateLimiter",
    "cors_options",
    "sanitize_value",
    "sanitized_body",
    "sanitized_query",
]
