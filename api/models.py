"""Pydantic models for the SomethingToDo API.

This module defines the request and response models used by the API
endpoints. Field names follow the camelCase wire format used by the app.
"""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ChatType = Literal["eventDiscovery", "eventPlanning", "generalSupport"]

CHAT_TYPES: tuple[str, ...] = ("eventDiscovery", "eventPlanning", "generalSupport")
SYNC_ACTIONS: tuple[str, ...] = ("create", "update", "delete")
MAX_MESSAGE_LENGTH = 1000


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ChatRequest(CamelModel):
    """Validated chat request."""
    session_id: str
    message: str = Field(..., max_length=MAX_MESSAGE_LENGTH)
    user_id: str
    chat_type: ChatType
    context: Optional[dict[str, Any]] = None


class ChatAction(CamelModel):
    """Client side action attached to an assistant reply."""
    id: str
    label: str
    type: str
    payload: dict[str, Any] = Field(default_factory=dict)


class AIResponse(CamelModel):
    """Assistant reply returned to the app and stored with the message."""
    content: str
    type: str = "text"
    actions: Optional[list[ChatAction]] = None
    metadata: Optional[dict[str, Any]] = None


class ChatResponse(CamelModel):
    success: bool = True
    response: AIResponse


class SuccessResponse(BaseModel):
    success: bool = True


class RecommendationsResponse(BaseModel):
    success: bool = True
    recommendations: list[dict[str, Any]] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """Response model for the health check endpoint.

    Attributes:
        status: Service status
        timestamp: ISO 8601 time of the check
        version: Service version
    """
    status: str = Field(description="Service status", examples=["healthy"])
    timestamp: str = Field(description="ISO 8601 timestamp", examples=["2024-01-01T00:00:00+00:00"])
    version: str = Field(description="Service version", examples=["1.0.0"])
