"""System prompts and tool definitions for the chat assistant."""

import json
from typing import Any

BASE_PROMPT = (
    "You are an AI assistant for SomethingToDo, an event discovery app. "
    "Be helpful, friendly, and focused on helping users discover and plan events."
)

CHAT_TYPE_PROMPTS = {
    "eventDiscovery": (
        "You help users find events based on their preferences, location, and interests. "
        "You can search for events, provide recommendations, and answer questions about "
        "venues and event details."
    ),
    "eventPlanning": (
        "You help users plan their event attendance by suggesting itineraries, nearby "
        "activities, transportation options, and coordination with friends."
    ),
    "generalSupport": (
        "You provide general support for the app, helping users navigate features, "
        "troubleshoot issues, and understand how to use the platform effectively."
    ),
}

SEARCH_EVENTS_TOOL = {
    "type": "function",
    "function": {
        "name": "search_events",
        "description": "Search for events based on criteria",
        "parameters": {
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Search query"},
                "category": {"type": "string", "description": "Event category"},
                "location": {"type": "string", "description": "Location filter"},
                "dateRange": {"type": "string", "description": "Date range filter"},
                "priceRange": {"type": "string", "description": "Price preference"},
            },
        },
    },
}

GET_RECOMMENDATIONS_TOOL = {
    "type": "function",
    "function": {
        "name": "get_recommendations",
        "description": "Get personalized event recommendations",
        "parameters": {
            "type": "object",
            "properties": {
                "interests": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "User interests",
                },
                "location": {"type": "string", "description": "User location"},
            },
        },
    },
}


def get_system_prompt(chat_type: str, context: dict[str, Any] | None = None) -> str:
    """Build the system prompt for a chat type, with optional user context."""
    context_str = f"\nUser context: {json.dumps(context, separators=(',', ':'))}" if context else ""

    suffix = CHAT_TYPE_PROMPTS.get(chat_type)
    if suffix is None:
        return BASE_PROMPT + context_str
    return f"{BASE_PROMPT} {suffix}{context_str}"


def get_chat_tools(chat_type: str) -> list[dict[str, Any]]:
    """Tools offered to the model; recommendations only while discovering."""
    tools = [SEARCH_EVENTS_TOOL]
    if chat_type == "eventDiscovery":
        tools.append(GET_RECOMMENDATIONS_TOOL)
    return tools
