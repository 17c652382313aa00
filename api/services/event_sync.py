"""Handlers for event lifecycle changes.

Search indexing and notifications are not implemented; the handlers record
the change and, for new events, confirm the document exists.
"""

import structlog
from google.cloud.firestore_v1.async_client import AsyncClient

from api.errors import BadRequestError
from api.models import SYNC_ACTIONS
from libs.firestore.events import get_event

logger = structlog.get_logger(__name__)


async def handle_event_created(client: AsyncClient, event_id: str) -> bool:
    """Returns whether the created event document exists."""
    logger.info("Event created", event_id=event_id)

    event = await get_event(client, event_id)
    if event is None:
        logger.warning("Created event not found", event_id=event_id)
        return False

    logger.info("Processing new event", event_id=event_id, fields=sorted(event))
    return True


async def handle_event_updated(client: AsyncClient, event_id: str) -> None:
    logger.info("Event updated", event_id=event_id)


async def handle_event_deleted(client: AsyncClient, event_id: str) -> None:
    logger.info("Event deleted", event_id=event_id)


HANDLERS = {
    "create": handle_event_created,
    "update": handle_event_updated,
    "delete": handle_event_deleted,
}


async def sync_event(client: AsyncClient, event_id: str, action: str) -> None:
    """Run the handler for one sync action.

    Raises:
        BadRequestError: The action is not one of create, update or delete.
    """
    if action not in SYNC_ACTIONS:
        raise BadRequestError("Invalid action")
    await HANDLERS[action](client, event_id)
