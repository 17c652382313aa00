"""
Pytest configuration and fixtures for SomethingToDo tests.

Provides shared fixtures for:
- Test settings with no external credentials
- A mocked async Firestore client
- A TestClient factory with auth and Firestore overridden
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from api.auth import User, get_current_user
from api.dependencies import get_firestore
from api.main import create_app
from libs.common.settings import Settings

TEST_USER = User(uid="test-uid", email="test@example.com")


class AsyncIterator:
    """Async iterator over a list, standing in for Firestore's ``stream()``."""

    def __init__(self, items):
        self._items = iter(items)

    def __aiter__(self):
        return self

    async def __anext__(self):
        try:
            return next(self._items)
        except StopIteration:
            raise StopAsyncIteration


def make_snapshot(data):
    """Document snapshot mock; ``None`` means the document does not exist."""
    snapshot = MagicMock()
    snapshot.exists = data is not None
    snapshot.to_dict.return_value = data
    return snapshot


def make_settings(**overrides) -> Settings:
    values = {"app_env": "test", "openai_api_key": None, "rapidapi_key": None}
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture(autouse=True)
def setup_test_env(monkeypatch):
    """Keep real credentials and runtime config out of the tests."""
    monkeypatch.setenv("APP_ENV", "test")
    for name in ("CLOUD_RUNTIME_CONFIG", "NODE_ENV", "OPENAI_API_KEY", "RAPIDAPI_KEY",
                 "RATE_LIMIT_MAX", "RATE_LIMIT_WINDOW", "ALLOWED_ORIGINS"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("RUNTIME_CONFIG_PATH", "/nonexistent/.runtimeconfig.json")


@pytest.fixture
def test_settings() -> Settings:
    return make_settings()


@pytest.fixture
def mock_firestore():
    """
    Provides a structured set of mocks for the async Firestore client.
    Returns a dictionary with handles to the client and key method mocks.
    """
    mock_add = AsyncMock()
    mock_set = AsyncMock()
    mock_get = AsyncMock(return_value=make_snapshot(None))

    mock_doc_ref = MagicMock()
    mock_doc_ref.set = mock_set
    mock_doc_ref.get = mock_get

    # where(), order_by() and limit() all return the same query
    mock_query = MagicMock()
    mock_query.stream = MagicMock(return_value=AsyncIterator([]))
    mock_query.order_by.return_value = mock_query
    mock_query.limit.return_value = mock_query
    mock_query.where.return_value = mock_query

    mock_collection_ref = MagicMock()
    mock_collection_ref.add = mock_add
    mock_collection_ref.document.return_value = mock_doc_ref
    mock_collection_ref.where.return_value = mock_query

    mock_client = MagicMock()
    mock_client.collection.return_value = mock_collection_ref

    return {
        "client": mock_client,
        "collection_mock": mock_collection_ref,
        "doc_mock": mock_doc_ref,
        "query_mock": mock_query,
        "add_mock": mock_add,
        "set_mock": mock_set,
        "get_mock": mock_get,
    }


@pytest.fixture
def make_client(mock_firestore):
    """Factory for a TestClient over a fresh app."""

    def _make(settings=None, chat_client=None, events_client=None, rate_limiter=None, authenticated=True):
        app = create_app(settings or make_settings(), rate_limiter=rate_limiter)
        if chat_client is not None:
            app.state.chat_client = chat_client
        if events_client is not None:
            app.state.events_client = events_client
        app.dependency_overrides[get_firestore] = lambda: mock_firestore["client"]
        if authenticated:
            app.dependency_overrides[get_current_user] = lambda: TEST_USER
        return TestClient(app)

    return _make
