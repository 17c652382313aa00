"""Pydantic models for Firestore collections.

These models define the structure of the documents stored in Firestore
and are used for data validation and serialization. Documents are read by
the mobile client, so fields are stored in camelCase.
"""
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class FirestoreModel(BaseModel):
    """Base model serializing to camelCase document fields."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class UserPreferences(FirestoreModel):
    """Per-user app preferences."""
    notifications_enabled: bool = True
    location_enabled: bool = False
    marketing_emails: bool = True
    theme: Literal["system", "light", "dark"] = "system"
    max_distance: float = 50.0
    preferred_categories: list[str] = Field(default_factory=list)
    price_preference: str = "any"


class UserProfile(FirestoreModel):
    """Represents a user's profile in Firestore."""
    id: str = Field(..., description="The user's unique Firebase UID.")
    email: str | None = None
    display_name: str | None = None
    photo_url: str | None = None
    phone_number: str | None = None
    is_premium: bool = False
    interests: list[str] = Field(default_factory=list)
    favorite_event_ids: list[str] = Field(default_factory=list)
    preferences: UserPreferences = Field(default_factory=UserPreferences)


class ChatMessage(FirestoreModel):
    """Represents a single chat message in Firestore."""
    session_id: str = Field(..., description="The session this message belongs to.")
    user_id: str = Field(..., description="The user who sent the message (or is receiving it).")
    role: Literal["user", "assistant"] = Field(..., description="The role of the message sender.")
    content: str = Field(..., description="The text content of the message.")
    type: str | None = None
    actions: list[dict[str, Any]] | None = None
    metadata: dict[str, Any] | None = None

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
