"""Functions for managing user profiles in Firestore."""

from typing import Any, Dict, List

from google.cloud.firestore_v1 import SERVER_TIMESTAMP
from google.cloud.firestore_v1.async_client import AsyncClient
from google.cloud.firestore_v1.base_query import FieldFilter

from libs.models.firestore import UserProfile

USERS_COLLECTION = "users"


async def get_user_profile(client: AsyncClient, uid: str) -> UserProfile | None:
    """Retrieves a user profile document from Firestore.

    Args:
        client: The asynchronous Firestore client.
        uid: The user's unique identifier.

    Returns:
        A UserProfile object if the profile exists, otherwise None.
    """
    doc_ref = client.collection(USERS_COLLECTION).document(uid)
    snapshot = await doc_ref.get()

    if not snapshot.exists:
        return None

    return UserProfile.model_validate(snapshot.to_dict())


async def create_user_profile(client: AsyncClient, profile: UserProfile) -> UserProfile:
    """Creates a new user profile document in Firestore.

    Args:
        client: The asynchronous Firestore client.
        profile: The UserProfile object containing the profile data.

    Returns:
        The created UserProfile object.
    """
    data = profile.to_document()
    data["createdAt"] = SERVER_TIMESTAMP
    data["updatedAt"] = SERVER_TIMESTAMP

    doc_ref = client.collection(USERS_COLLECTION).document(profile.id)
    await doc_ref.set(data)
    return profile


async def list_users_with_notifications(client: AsyncClient) -> List[Dict[str, Any]]:
    """Returns every user profile document with notifications enabled."""
    query = client.collection(USERS_COLLECTION).where(
        filter=FieldFilter("preferences.notificationsEnabled", "==", True)
    )
    return [doc.to_dict() async for doc in query.stream()]
