"""Functions for managing chat messages and chat sessions in Firestore."""

from typing import Any, Dict, List

from google.cloud.firestore_v1 import SERVER_TIMESTAMP
from google.cloud.firestore_v1.async_client import AsyncClient
from google.cloud.firestore_v1.base_query import FieldFilter

from libs.models.firestore import ChatMessage

MESSAGES_COLLECTION = "messages"
SESSIONS_COLLECTION = "chatSessions"


async def add_chat_message(client: AsyncClient, message: ChatMessage) -> None:
    """Appends a message to the messages collection.

    Args:
        client: The Firestore client.
        message: The message to store. The timestamp is assigned by the server.
    """
    data = message.to_document()
    data["timestamp"] = SERVER_TIMESTAMP
    await client.collection(MESSAGES_COLLECTION).add(data)


async def get_chat_history(
    client: AsyncClient, session_id: str, limit: int = 20
) -> List[Dict[str, Any]]:
    """Fetches the last N messages of a chat session.

    Args:
        client: The Firestore client.
        session_id: The ID of the session.
        limit: The maximum number of messages to retrieve.

    Returns:
        A list of messages, ordered from oldest to newest.
    """
    query = (
        client.collection(MESSAGES_COLLECTION)
        .where(filter=FieldFilter("sessionId", "==", session_id))
        .order_by("timestamp", direction="DESCENDING")
        .limit(limit)
    )

    history = [doc.to_dict() async for doc in query.stream()]

    # Newest first from the query, callers want chronological order.
    return history[::-1]


async def touch_chat_session(client: AsyncClient, session_id: str) -> None:
    """Marks a chat session as updated now."""
    doc_ref = client.collection(SESSIONS_COLLECTION).document(session_id)
    await doc_ref.set({"updatedAt": SERVER_TIMESTAMP}, merge=True)
