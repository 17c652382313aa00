"""CORS options derived from the configured allowed origins."""

from __future__ import annotations

import re
from typing import Any

from libs.common.settings import Settings

CORS_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
CORS_HEADERS = ["Content-Type", "Authorization"]
CORS_MAX_AGE = 86400


def build_origin_regex(origins: list[str]) -> str | None:
    """Regex matching any origin that starts with a configured origin.

    A ``*`` inside a configured origin is dropped before matching, so
    ``https://*`` admits every https origin.
    """
    prefixes = [origin.replace("*", "") for origin in origins]
    prefixes = [prefix for prefix in prefixes if prefix]
    if not prefixes:
        return None
    return "(?:" + "|".join(re.escape(prefix) for prefix in prefixes) + ").*"


def cors_options(settings: Settings) -> dict[str, Any]:
    """Keyword arguments for Starlette's CORSMiddleware."""
    origins = settings.cors_origins
    options: dict[str, Any] = {
        "allow_credentials": True,
        "allow_methods": CORS_METHODS,
        "allow_headers": CORS_HEADERS,
        "max_age": CORS_MAX_AGE,
    }
    if "*" in origins:
        # Credentialed requests echo the caller's origin instead of "*".
        options["allow_origin_regex"] = ".*"
        return options

    options["allow_origins"] = origins
    options["allow_origin_regex"] = build_origin_regex(origins)
    return options
