from typing import Any

import structlog
from fastapi import APIRouter, Depends
from google.cloud.firestore_v1.async_client import AsyncClient

from api.auth import User, get_current_user
from api.dependencies import get_app_settings, get_chat_client, get_firestore
from api.errors import APIError, BadRequestError, InternalError
from api.llm.chat_client import ChatCompletionClient
from api.middleware.sanitizer import sanitized_body
from api.models import CHAT_TYPES, MAX_MESSAGE_LENGTH, ChatRequest, ChatResponse
from libs.common.settings import Settings
from libs.firestore.session import add_chat_message, get_chat_history, touch_chat_session
from libs.models.firestore import ChatMessage

router = APIRouter()
logger = structlog.get_logger(__name__)

REQUIRED_FIELDS = ("sessionId", "message", "userId", "chatType")


def parse_chat_request(body: dict[str, Any]) -> ChatRequest:
    """Validate a sanitized chat body.

    Raises:
        BadRequestError: A field is missing, too long or not allowed.
    """
    if any(not isinstance(body.get(field), str) or not body.get(field) for field in REQUIRED_FIELDS):
        raise BadRequestError("Missing required fields")

    if len(body["message"]) > MAX_MESSAGE_LENGTH:
        raise BadRequestError("Message too long")

    if body["chatType"] not in CHAT_TYPES:
        raise BadRequestError("Invalid chat type")

    context = body.get("context")
    if context is not None and not isinstance(context, dict):
        raise BadRequestError("Invalid context")

    return ChatRequest(
        session_id=body["sessionId"],
        message=body["message"],
        user_id=body["userId"],
        chat_type=body["chatType"],
        context=context or None,
    )


@router.post(
    "/chat",
    response_model=ChatResponse,
    response_model_exclude_none=True,
    response_model_by_alias=True,
    tags=["Chat"],
    summary="Send a chat message to the assistant",
)
async def chat(
    current_user: User = Depends(get_current_user),
    body: dict[str, Any] = Depends(sanitized_body),
    settings: Settings = Depends(get_app_settings),
    chat_client: ChatCompletionClient = Depends(get_chat_client),
    firestore_client: AsyncClient = Depends(get_firestore),
) -> ChatResponse:
    """
    Answer a chat message and store both sides of the exchange.

    The reply is generated before anything is written, so a rejected or
    failed request leaves the session untouched.

    Raises:
        BadRequestError: 400 for missing fields, long messages or unknown chat types
        UpstreamUnavailableError: 503 when the assistant is unavailable
        InternalError: 500 for any other failure
    """
    request = parse_chat_request(body)

    try:
        history = await get_chat_history(firestore_client, request.session_id, settings.chat_history_limit)

        ai_response = await chat_client.generate_response(
            request.message, history, request.chat_type, request.context
        )

        await add_chat_message(firestore_client, ChatMessage(
            session_id=request.session_id,
            user_id=request.user_id,
            role="user",
            content=request.message,
        ))
        await add_chat_message(firestore_client, ChatMessage(
            session_id=request.session_id,
            user_id=request.user_id,
            role="assistant",
            content=ai_response.content,
            type=ai_response.type or "text",
            actions=[action.model_dump(by_alias=True) for action in ai_response.actions or []],
            metadata=ai_response.metadata or {},
        ))
        await touch_chat_session(firestore_client, request.session_id)

    except APIError:
        raise
    except Exception as e:
        logger.error(
            "Chat API error",
            session_id=request.session_id,
            uid=current_user.uid,
            error_type=type(e).__name__,
            exc_info=True,
        )
        raise InternalError("Failed to process chat message", details=str(e))

    logger.info(
        "Chat message processed",
        session_id=request.session_id,
        chat_type=request.chat_type,
        response_type=ai_response.type,
    )
    return ChatResponse(success=True, response=ai_response)
