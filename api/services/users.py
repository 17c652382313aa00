"""New account setup."""

from typing import Any

import structlog
from google.cloud.firestore_v1.async_client import AsyncClient

from libs.firestore.users import create_user_profile
from libs.models.firestore import UserProfile

logger = structlog.get_logger(__name__)


async def initialize_new_user(client: AsyncClient, user_record: Any) -> UserProfile:
    """Create the profile document for a newly created account.

    ``user_record`` is any object with a ``uid`` and optional ``email``,
    ``display_name``, ``photo_url`` and ``phone_number`` attributes, such as
    a firebase-admin ``UserRecord`` or an auth trigger's user record.
    """
    profile = UserProfile(
        id=user_record.uid,
        email=getattr(user_record, "email", None),
        display_name=getattr(user_record, "display_name", None),
        photo_url=getattr(user_record, "photo_url", None),
        phone_number=getattr(user_record, "phone_number", None),
    )
    await create_user_profile(client, profile)

    logger.info("User profile initialized", uid=profile.id)
    return profile
