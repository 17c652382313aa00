"""Bodies of the background functions.

The functions runtime bindings in ``main.py`` only unpack the trigger
payload and call these coroutines.
"""

from __future__ import annotations

from typing import Any

import structlog
from google.cloud.firestore_v1.async_client import AsyncClient

from api.services.event_sync import handle_event_created, handle_event_deleted, handle_event_updated
from api.services.recommendations import send_daily_recommendations
from api.services.users import initialize_new_user
from libs.firebase.client import get_firestore_async_client

logger = structlog.get_logger(__name__)


async def on_event_created(event_id: str, client: AsyncClient | None = None) -> None:
    await handle_event_created(client or get_firestore_async_client(), event_id)


async def on_event_updated(event_id: str, client: AsyncClient | None = None) -> None:
    await handle_event_updated(client or get_firestore_async_client(), event_id)


async def on_event_deleted(event_id: str, client: AsyncClient | None = None) -> None:
    await handle_event_deleted(client or get_firestore_async_client(), event_id)


async def on_user_created(user_record: Any, client: AsyncClient | None = None) -> None:
    """Create the profile for a new account.

    Runs inside the blocking sign-up hook, where a raised exception would
    reject the account, so failures are logged and swallowed.
    """
    try:
        await initialize_new_user(client or get_firestore_async_client(), user_record)
    except Exception as e:
        logger.error(
            "User profile initialization failed",
            uid=getattr(user_record, "uid", None),
            error=str(e),
            exc_info=True,
        )


async def daily_recommendations(client: AsyncClient | None = None) -> int:
    logger.info("Daily recommendations job started")
    return await send_daily_recommendations(client or get_firestore_async_client())
