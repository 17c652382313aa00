"""Local stubs the model can call instead of answering in free text.

A tool call is answered once with canned content; the model is not called
again with the tool result.
"""

import json
from typing import Any

import structlog

from api.models import AIResponse, ChatAction

logger = structlog.get_logger(__name__)

TOOL_ERROR_REPLY = "I encountered an error processing your request."


async def search_events(args: dict[str, Any]) -> AIResponse:
    return AIResponse(
        content="I found several events matching your criteria. Here are some great options for you!",
        type="event",
        actions=[
            ChatAction(id="view_events", label="View Events", type="filterEvents", payload=args),
        ],
    )


async def get_recommendations(args: dict[str, Any]) -> AIResponse:
    return AIResponse(
        content="Based on your interests, I have some personalized recommendations for you!",
        type="event",
        metadata={"recommendationType": "personalized"},
    )


TOOL_HANDLERS = {
    "search_events": search_events,
    "get_recommendations": get_recommendations,
}


async def dispatch_tool_call(name: str, arguments: str | None) -> AIResponse:
    """Run the stub for a model tool call."""
    handler = TOOL_HANDLERS.get(name)
    if handler is None:
        logger.warning("Model requested unknown tool", tool=name)
        return AIResponse(content=TOOL_ERROR_REPLY, type="text")

    try:
        args = json.loads(arguments) if arguments else {}
    except json.JSONDecodeError:
        logger.warning("Tool call arguments are not valid JSON", tool=name)
        return AIResponse(content=TOOL_ERROR_REPLY, type="text")

    if not isinstance(args, dict):
        return AIResponse(content=TOOL_ERROR_REPLY, type="text")

    logger.info("Dispatching tool call", tool=name)
    return await handler(args)
