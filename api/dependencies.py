"""FastAPI dependencies for app-scoped collaborators.

Clients are created once per app in ``create_app`` and kept on
``app.state``; tests swap them through ``app.dependency_overrides``.
"""

from fastapi import Request
from google.cloud.firestore_v1.async_client import AsyncClient

from api.events_api import EventsSearchClient
from api.llm.chat_client import ChatCompletionClient
from libs.common.settings import Settings
from libs.firebase.client import get_firestore_async_client


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_chat_client(request: Request) -> ChatCompletionClient:
    return request.app.state.chat_client


def get_events_client(request: Request) -> EventsSearchClient:
    return request.app.state.events_client


def get_firestore() -> AsyncClient:
    return get_firestore_async_client()
