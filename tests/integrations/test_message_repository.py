"""
Unit tests for MessageRepository against a stubbed PostgREST query builder.
"""

import asyncio
from types import SimpleNamespace
from typing import Any, List

import pytest
from postgrest.exceptions import APIError

from chatgenius.integrations.supabase.client import ChatRepositoryError
from chatgenius.integrations.supabase.messages import MessageRepository
from chatgenius.models.chat import ContextType, FileMetadata, MessageContext


class QueryStub:
    """Records builder calls; ``execute`` pops the next queued response."""

    def __init__(self, client, table):
        self.client = client
        self.table = table
        self.calls: List[tuple] = []

    def __getattr__(self, name):
        def method(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self

        return method

    @property
    def not_(self):
        self.calls.append(("not_", (), {}))
        return self

    async def execute(self):
        result = self.client.responses.pop(0)
        if isinstance(result, Exception):
            raise result
        return SimpleNamespace(data=result)


class ClientStub:
    def __init__(self, responses: List[Any]):
        self.responses = list(responses)
        self.queries: List[QueryStub] = []

    def table(self, name):
        query = QueryStub(self, name)
        self.queries.append(query)
        return query


def row(message_id, minutes, **overrides):
    data = {
        "id": message_id,
        "content": f"message {message_id}",
        "created_at": f"2024-01-15T10:{minutes:02d}:00+00:00",
        "channel_id": "chan-1",
        "user_id": "u1",
        "users": {"id": "u1", "username": "alice", "full_name": "Alice"},
    }
    data.update(overrides)
    return data


CHANNEL = MessageContext(type=ContextType.CHANNEL, id="chan-1")


def test_fetch_page_returns_ascending_with_cursor():
    client = ClientStub([[row("m3", 3), row("m2", 2)]])
    page = asyncio.run(MessageRepository(client).fetch_page(CHANNEL, limit=2))

    assert [m.id for m in page.messages] == ["m2", "m3"]
    assert page.cursor == "2024-01-15T10:02:00+00:00"
    assert page.has_more is True

    calls = client.queries[0].calls
    assert ("eq", ("channel_id", "chan-1"), {}) in calls
    assert ("is_", ("parent_message_id", "null"), {}) in calls
    assert ("order", ("created_at",), {"desc": True}) in calls
    assert ("limit", (2,), {}) in calls


def test_fetch_page_before_cursor():
    client = ClientStub([[row("m1", 1)]])
    page = asyncio.run(
        MessageRepository(client).fetch_page(CHANNEL, limit=25, before="2024-01-15T10:02:00+00:00")
    )

    assert page.has_more is False
    assert ("lt", ("created_at", "2024-01-15T10:02:00+00:00"), {}) in client.queries[0].calls


def test_fetch_page_empty():
    page = asyncio.run(MessageRepository(ClientStub([[]])).fetch_page(CHANNEL, limit=25))
    assert page.messages == []
    assert page.cursor is None
    assert page.has_more is False


def test_thread_page_filters_on_parent():
    client = ClientStub([[]])
    context = MessageContext(type=ContextType.THREAD, id="p1", parent_channel_id="chan-1")
    asyncio.run(MessageRepository(client).fetch_page(context, limit=25))

    assert ("eq", ("parent_message_id", "p1"), {}) in client.queries[0].calls


def test_create_message_with_file_writes_both_rows():
    client = ClientStub([[{"id": "m1"}], [{"id": "f1"}], [row("m1", 0)]])
    file = FileMetadata(bucket_path="chan-1/a.txt", file_name="a.txt", file_size=5, content_type="text/plain")

    message = asyncio.run(MessageRepository(client).create_message(CHANNEL, "u1", "hi", file))

    assert message.id == "m1"
    assert [q.table for q in client.queries] == ["messages", "files", "messages"]
    insert = client.queries[0].calls[0]
    assert insert[0] == "insert"
    assert insert[1][0] == {"content": "hi", "user_id": "u1", "channel_id": "chan-1"}


def test_failed_file_record_deletes_message():
    client = ClientStub(
        [
            [{"id": "m1"}],
            APIError({"message": "permission denied", "code": "42501"}),
            [],
        ]
    )
    file = FileMetadata(bucket_path="chan-1/a.txt", file_name="a.txt", file_size=5, content_type="text/plain")

    with pytest.raises(ChatRepositoryError) as exc_info:
        asyncio.run(MessageRepository(client).create_message(CHANNEL, "u1", "hi", file))

    assert exc_info.value.code == "42501"
    delete_query = client.queries[2]
    assert delete_query.table == "messages"
    assert delete_query.calls[0][0] == "delete"
    assert ("eq", ("id", "m1"), {}) in delete_query.calls


def test_fetch_unembedded_excludes_processed_ids():
    client = ClientStub([[{"message_id": "m1"}], [{"id": "m2", "content": "x"}]])
    rows = asyncio.run(MessageRepository(client).fetch_unembedded(3))

    assert rows == [{"id": "m2", "content": "x"}]
    calls = client.queries[1].calls
    assert ("not_", (), {}) in calls
    assert ("in_", ("id", ["m1"]), {}) in calls
    assert ("limit", (3,), {}) in calls
