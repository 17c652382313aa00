"""Input sanitization applied to request bodies and query parameters."""

from __future__ import annotations

import json
import re
from typing import Any

import structlog
from fastapi import Request

from api.errors import BadRequestError

logger = structlog.get_logger(__name__)

MAX_STRING_LENGTH = 1000

_SCRIPT_BLOCK = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
_SCRIPT_TAG = re.compile(r"</?script\b[^>]*>?", re.IGNORECASE)
_INJECTION = re.compile(r"[';]|(--)|(\*|/\*|\*/)|(\bOR\b|\bAND\b)", re.IGNORECASE)


def _clean_once(value: str) -> str:
    value = _SCRIPT_BLOCK.sub("", value)
    value = _SCRIPT_TAG.sub("", value)
    value = _INJECTION.sub("", value)
    return value.strip()[:MAX_STRING_LENGTH]


def sanitize_string(value: str) -> str:
    """Strip script tags and injection sequences, trim and truncate.

    Removing one sequence can join its neighbours into another, so cleaning
    repeats until the value is stable. Each pass either shortens the value or
    leaves it unchanged, which makes the result idempotent.
    """
    previous = None
    while value != previous:
        previous = value
        value = _clean_once(value)
    return value


def sanitize_value(value: Any) -> Any:
    """Recursively sanitize strings inside dicts and lists.

    Other values are returned untouched.
    """
    if isinstance(value, str):
        return sanitize_string(value)
    if isinstance(value, dict):
        return {key: sanitize_value(item) for key, item in value.items()}
    if isinstance(value, list):
        return [sanitize_value(item) for item in value]
    return value


async def sanitized_body(request: Request) -> dict[str, Any]:
    """FastAPI dependency returning the sanitized JSON body.

    An empty body is treated as ``{}``; anything that is not a JSON object
    is rejected with 400.
    """
    raw = await request.body()
    if not raw.strip():
        return {}

    try:
        payload = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.info("Rejected malformed request body", path=request.url.path, error=str(e))
        raise BadRequestError("Invalid input")

    if not isinstance(payload, dict):
        raise BadRequestError("Invalid input")

    return sanitize_value(payload)


async def sanitized_query(request: Request) -> dict[str, Any]:
    """FastAPI dependency returning sanitized query parameters."""
    return sanitize_value(dict(request.query_params))
