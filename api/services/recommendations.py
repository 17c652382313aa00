"""Personalized recommendations.

Ranking is not implemented yet: known users get an empty list, the same as
unknown ones.
"""

from typing import Any, Dict, List

import structlog
from google.cloud.firestore_v1.async_client import AsyncClient

from libs.firestore.users import get_user_profile, list_users_with_notifications

logger = structlog.get_logger(__name__)


async def generate_personalized_recommendations(client: AsyncClient, user_id: str) -> List[Dict[str, Any]]:
    profile = await get_user_profile(client, user_id)
    if profile is None:
        logger.info("No profile for recommendations", user_id=user_id)
        return []

    logger.info(
        "Generating recommendations",
        user_id=user_id,
        interests=len(profile.interests),
        preferred_categories=len(profile.preferences.preferred_categories),
    )
    return []


async def send_daily_recommendations(client: AsyncClient) -> int:
    """Generate recommendations for every user with notifications enabled.

    Returns:
        The number of users processed.
    """
    users = await list_users_with_notifications(client)

    processed = 0
    for user in users:
        user_id = user.get("id")
        if not user_id:
            continue
        await generate_personalized_recommendations(client, user_id)
        processed += 1

    logger.info("Daily recommendations complete", users=processed)
    return processed
