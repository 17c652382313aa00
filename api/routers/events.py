from __future__ import annotations

import math
from typing import Any

import structlog
from fastapi import APIRouter, Depends
from google.cloud.firestore_v1.async_client import AsyncClient

from api.auth import User, get_current_user
from api.dependencies import get_events_client, get_firestore
from api.errors import APIError, BadRequestError, InternalError, UpstreamUnavailableError
from api.events_api import MAX_LIMIT, MAX_RADIUS, EventsAPIError, EventsSearchClient
from api.middleware.sanitizer import sanitized_body, sanitized_query
from api.models import SuccessResponse
from api.placeholder_events import generate_placeholder_events
from api.services.event_sync import sync_event

router = APIRouter()
logger = structlog.get_logger(__name__)


def _number_param(query: dict[str, Any], name: str, error: str) -> float | None:
    """Parse an optional numeric query parameter; empty counts as absent."""
    value = query.get(name)
    if value is None or value == "":
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise BadRequestError(error)
    if not math.isfinite(number):
        raise BadRequestError(error)
    return number


def _limit_param(query: dict[str, Any]) -> float | None:
    limit = _number_param(query, "limit", "Invalid limit parameter")
    if limit is not None and limit > MAX_LIMIT:
        raise BadRequestError("Invalid limit parameter")
    return limit


def _page_param(query: dict[str, Any]) -> float:
    try:
        return _number_param(query, "page", "Invalid page parameter") or 1
    except BadRequestError:
        return 1


@router.post("/events/sync", response_model=SuccessResponse, tags=["Events"], summary="Sync an event change")
async def sync_events(
    current_user: User = Depends(get_current_user),
    body: dict[str, Any] = Depends(sanitized_body),
    firestore_client: AsyncClient = Depends(get_firestore),
) -> SuccessResponse:
    """
    Run the create, update or delete handler for an event.

    Raises:
        BadRequestError: 400 if eventId or action is missing or the action is unknown
        InternalError: 500 if the handler fails
    """
    event_id = body.get("eventId")
    action = body.get("action")

    if not event_id or not action:
        raise BadRequestError("Missing required fields")

    try:
        await sync_event(firestore_client, str(event_id), action)
    except APIError:
        raise
    except Exception as e:
        logger.error("Event sync error", event_id=event_id, action=action, error=str(e), exc_info=True)
        raise InternalError("Failed to sync event", details=str(e))

    logger.info("Event synced", event_id=event_id, action=action, uid=current_user.uid)
    return SuccessResponse(success=True)


@router.get("/events/search", tags=["Events"], summary="Search events")
async def search_events(
    query: dict[str, Any] = Depends(sanitized_query),
    events_client: EventsSearchClient = Depends(get_events_client),
) -> Any:
    """
    Search events by text, location and date.

    Falls back to placeholder events when the search API has no key or fails.

    Example:
        ```bash
        curl "http://localhost:8000/events/search?lat=37.77&lng=-122.41&limit=10"
        ```
    """
    lat = _number_param(query, "lat", "Invalid coordinates")
    lng = _number_param(query, "lng", "Invalid coordinates")
    limit = _limit_param(query)
    limit = 20 if limit is None else limit
    radius = _number_param(query, "radius", "Invalid radius parameter")
    radius = 10 if radius is None else radius

    def placeholder() -> dict[str, Any]:
        return {"data": generate_placeholder_events(lat or 0.0, lng or 0.0, limit)}

    if not events_client.is_configured:
        logger.error("RapidAPI key is not configured, serving placeholder events")
        return placeholder()

    try:
        return await events_client.search(
            query=query.get("query"),
            location=query.get("location"),
            lat=lat,
            lng=lng,
            radius=radius,
            start=query.get("start"),
            end=query.get("end"),
            category=query.get("category"),
            limit=limit,
            page=_page_param(query),
        )
    except EventsAPIError as e:
        logger.warning("Events search failed, serving placeholder events", error=str(e))
        return placeholder()


@router.get("/events/trending", tags=["Events"], summary="Trending events")
async def trending_events(
    query: dict[str, Any] = Depends(sanitized_query),
    events_client: EventsSearchClient = Depends(get_events_client),
) -> Any:
    limit = _limit_param(query)

    if not events_client.is_configured:
        return {"data": generate_placeholder_events(0.0, 0.0, limit or 20)}

    try:
        return await events_client.trending(location=query.get("location"), limit=limit)
    except EventsAPIError as e:
        logger.error("Trending events error", error=str(e))
        raise InternalError("Failed to get trending events", details=str(e))


@router.get("/events/nearby", tags=["Events"], summary="Events near a location")
async def nearby_events(
    query: dict[str, Any] = Depends(sanitized_query),
    events_client: EventsSearchClient = Depends(get_events_client),
) -> Any:
    lat = _number_param(query, "lat", "Invalid coordinates")
    lng = _number_param(query, "lng", "Invalid coordinates")
    if lat is None or lng is None:
        raise BadRequestError("Invalid coordinates")

    radius = _number_param(query, "radius", "Invalid radius parameter")
    if radius is not None and radius > MAX_RADIUS:
        raise BadRequestError("Invalid radius parameter")
    limit = _limit_param(query)

    if not events_client.is_configured:
        return {"data": generate_placeholder_events(lat, lng, limit or 20)}

    try:
        return await events_client.nearby(lat, lng, radius=radius, limit=limit)
    except EventsAPIError as e:
        logger.error("Nearby events error", error=str(e))
        raise InternalError("Failed to get nearby events", details=str(e))


@router.get("/events/details", tags=["Events"], summary="Event details")
async def event_details(
    query: dict[str, Any] = Depends(sanitized_query),
    events_client: EventsSearchClient = Depends(get_events_client),
) -> Any:
    event_id = query.get("event_id")
    if not event_id:
        raise BadRequestError("Missing event ID")

    if not events_client.is_configured:
        raise UpstreamUnavailableError("Service temporarily unavailable")

    try:
        return await events_client.details(event_id)
    except EventsAPIError as e:
        logger.error("Event details error", error=str(e))
        raise InternalError("Failed to get event details", details=str(e))


@router.get("/events/category", tags=["Events"], summary="Events by category")
async def events_by_category(
    query: dict[str, Any] = Depends(sanitized_query),
    events_client: EventsSearchClient = Depends(get_events_client),
) -> Any:
    category = query.get("category")
    if not category:
        raise BadRequestError("Missing category parameter")
    limit = _limit_param(query)

    if not events_client.is_configured:
        return {"data": generate_placeholder_events(0.0, 0.0, limit or 20)}

    try:
        return await events_client.by_category(category, location=query.get("location"), limit=limit)
    except EventsAPIError as e:
        logger.error("Category events error", error=str(e))
        raise InternalError("Failed to get events by category", details=str(e))
