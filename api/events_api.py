"""Client for the third-party real-time events search API.

Each call forwards a bounded set of query parameters and returns the
upstream JSON unchanged.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from api.errors import UpstreamUnavailableError
from libs.common.settings import Settings

logger = structlog.get_logger(__name__)

SEARCH_TIMEOUT = 15.0
LOOKUP_TIMEOUT = 10.0
MAX_RADIUS = 50
MAX_LIMIT = 100
DEFAULT_LIMIT = 20
DEFAULT_RADIUS = 10
TRENDING_QUERY = "events trending music concert sports"


class EventsAPIError(Exception):
    """The events API could not be reached or answered with an error."""


def _number(value: float) -> int | float:
    """Send integral values without a trailing .0."""
    return int(value) if float(value).is_integer() else value


def _truncate(value: Any, length: int) -> str:
    return str(value)[:length]


def _capped_limit(limit: float | None) -> int | float:
    return _number(min(limit or DEFAULT_LIMIT, MAX_LIMIT))


class EventsSearchClient:
    """Thin async wrapper around the events search endpoints."""

    def __init__(self, api_key: str | None, host: str = "real-time-events-search.p.rapidapi.com"):
        self.api_key = api_key
        self.host = host
        self.base_url = f"https://{host}"

    @classmethod
    def from_settings(cls, settings: Settings) -> "EventsSearchClient":
        return cls(api_key=settings.rapidapi_key, host=settings.rapidapi_host)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def _get(self, path: str, params: dict[str, Any], timeout: float) -> Any:
        if not self.is_configured:
            raise UpstreamUnavailableError("Events search is not configured")

        headers = {
            "X-RapidAPI-Key": self.api_key,
            "X-RapidAPI-Host": self.host,
        }
        try:
            async with httpx.AsyncClient(timeout=timeout) as client:
                response = await client.get(f"{self.base_url}{path}", params=params, headers=headers)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            logger.error("Events API error", path=path, status_code=e.response.status_code)
            raise EventsAPIError(f"Events API returned {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error("Events API request failed", path=path, error_type=type(e).__name__)
            raise EventsAPIError(f"Events API request failed: {type(e).__name__}") from e
        except ValueError as e:
            logger.error("Events API returned invalid JSON", path=path)
            raise EventsAPIError("Events API returned invalid JSON") from e

    async def search(
        self,
        *,
        query: str | None = None,
        location: str | None = None,
        lat: float | None = None,
        lng: float | None = None,
        radius: float | None = DEFAULT_RADIUS,
        start: str | None = None,
        end: str | None = None,
        category: str | None = None,
        limit: float | None = DEFAULT_LIMIT,
        page: float | None = 1,
    ) -> Any:
        params: dict[str, Any] = {}
        if query:
            params["query"] = _truncate(query, 100)
        if location:
            params["location"] = _truncate(location, 100)
        elif lat is not None and lng is not None:
            params["location"] = f"{_number(lat)},{_number(lng)}"
        if radius:
            params["radius"] = _number(min(radius, MAX_RADIUS))
        if start:
            params["start"] = _truncate(start, 20)
        if end:
            params["end"] = _truncate(end, 20)
        if category:
            params["category"] = _truncate(category, 50)
        params["limit"] = _capped_limit(limit)
        params["page"] = _number(max(1, page or 1))
        params["sort"] = "date"

        return await self._get("/search-events", params, SEARCH_TIMEOUT)

    async def trending(self, location: str | None = None, limit: float | None = None) -> Any:
        params: dict[str, Any] = {"query": TRENDING_QUERY}
        if location:
            params["location"] = _truncate(location, 100)
        params["limit"] = _capped_limit(limit)
        return await self._get("/search-events", params, SEARCH_TIMEOUT)

    async def nearby(self, lat: float, lng: float, radius: float | None = None, limit: float | None = None) -> Any:
        params = {
            "query": "events",
            "location": f"{_number(lat)},{_number(lng)}",
            "radius": _number(min(radius or DEFAULT_RADIUS, MAX_RADIUS)),
            "limit": _capped_limit(limit),
        }
        return await self._get("/search-events", params, SEARCH_TIMEOUT)

    async def details(self, event_id: str) -> Any:
        return await self._get("/event-details", {"event_id": _truncate(event_id, 100)}, LOOKUP_TIMEOUT)

    async def by_category(self, category: str, location: str | None = None, limit: float | None = None) -> Any:
        params: dict[str, Any] = {"category": _truncate(category, 50)}
        if location:
            params["location"] = _truncate(location, 100)
        params["limit"] = _capped_limit(limit)
        return await self._get("/events-by-category", params, LOOKUP_TIMEOUT)
