import pytest
from google.cloud.firestore_v1 import SERVER_TIMESTAMP

from conftest import AsyncIterator, make_snapshot
from libs.firestore.events import get_event
from libs.firestore.session import add_chat_message, get_chat_history, touch_chat_session
from libs.models.firestore import ChatMessage


@pytest.mark.asyncio
async def test_add_chat_message(mock_firestore):
    client = mock_firestore["client"]
    add_mock = mock_firestore["add_mock"]
    message = ChatMessage(session_id="session-1", user_id="user-1", role="user", content="Hello")

    await add_chat_message(client, message)

    client.collection.assert_called_with("messages")
    add_mock.assert_awaited_once_with({
        "sessionId": "session-1",
        "userId": "user-1",
        "role": "user",
        "content": "Hello",
        "timestamp": SERVER_TIMESTAMP,
    })


@pytest.mark.asyncio
async def test_get_chat_history_is_chronological(mock_firestore):
    client = mock_firestore["client"]
    query_mock = mock_firestore["query_mock"]
    query_mock.stream.return_value = AsyncIterator([
        make_snapshot({"content": "third"}),
        make_snapshot({"content": "second"}),
        make_snapshot({"content": "first"}),
    ])

    history = await get_chat_history(client, "session-1", limit=3)

    assert [m["content"] for m in history] == ["first", "second", "third"]
    query_mock.order_by.assert_called_once_with("timestamp", direction="DESCENDING")
    query_mock.limit.assert_called_once_with(3)


@pytest.mark.asyncio
async def test_get_chat_history_empty(mock_firestore):
    assert await get_chat_history(mock_firestore["client"], "new-session") == []
    mock_firestore["query_mock"].limit.assert_called_once_with(20)


@pytest.mark.asyncio
async def test_touch_chat_session_merges(mock_firestore):
    await touch_chat_session(mock_firestore["client"], "session-1")

    mock_firestore["client"].collection.assert_called_with("chatSessions")
    mock_firestore["collection_mock"].document.assert_called_with("session-1")
    mock_firestore["set_mock"].assert_awaited_once_with({"updatedAt": SERVER_TIMESTAMP}, merge=True)


@pytest.mark.asyncio
async def test_get_event(mock_firestore):
    assert await get_event(mock_firestore["client"], "missing") is None

    mock_firestore["get_mock"].return_value = make_snapshot({"name": "Jazz Night"})
    assert await get_event(mock_firestore["client"], "evt-1") == {"name": "Jazz Night"}
