"""Read access to the events collection."""

from typing import Any, Dict

from google.cloud.firestore_v1.async_client import AsyncClient

EVENTS_COLLECTION = "events"


async def get_event(client: AsyncClient, event_id: str) -> Dict[str, Any] | None:
    """Returns the event document data, or None when it does not exist."""
    snapshot = await client.collection(EVENTS_COLLECTION).document(event_id).get()
    if not snapshot.exists:
        return None
    return snapshot.to_dict()
