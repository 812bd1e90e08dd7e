"""
Unit tests for the Supabase realtime adapter.
"""

import asyncio
import logging
from unittest.mock import AsyncMock, MagicMock

from chatgenius.integrations.supabase.realtime import SupabaseRealtimeFeed, parse_change_payload
from chatgenius.sync.feed import ChangeBinding, ChangeType

BINDING = ChangeBinding(ChangeType.INSERT, "messages", filter="channel_id=eq.chan-1")


def test_parse_realtime_payload():
    payload = {
        "data": {
            "type": "UPDATE",
            "table": "messages",
            "record": {"id": "m1", "content": "edited"},
            "old_record": {"id": "m1"},
        }
    }
    event = parse_change_payload(payload, BINDING)
    assert event.type == ChangeType.UPDATE
    assert event.record["content"] == "edited"
    assert event.row_id == "m1"


def test_parse_legacy_payload_shape():
    event = parse_change_payload({"eventType": "DELETE", "old": {"id": "m2"}, "new": {}}, BINDING)
    assert event.type == ChangeType.DELETE
    assert event.row_id == "m2"


def test_parse_defaults_to_binding_event():
    event = parse_change_payload({"record": {"id": "m3"}}, BINDING)
    assert event.type == ChangeType.INSERT
    assert event.table == "messages"


def test_subscribe_registers_bindings_and_dispatches():
    channel = MagicMock()
    channel.subscribe = AsyncMock()
    client = MagicMock()
    client.channel.return_value = channel
    client.remove_channel = AsyncMock()
    received = []

    async def handler(event):
        received.append(event)

    async def scenario():
        feed = SupabaseRealtimeFeed(client)
        subscription = await feed.subscribe("messages:chan-1", [BINDING], handler)

        callback = channel.on_postgres_changes.call_args.kwargs["callback"]
        callback({"data": {"type": "INSERT", "table": "messages", "record": {"id": "m1"}}})
        await asyncio.sleep(0)

        await subscription.unsubscribe()

    asyncio.run(scenario())

    client.channel.assert_called_once_with("messages:chan-1")
    args, kwargs = channel.on_postgres_changes.call_args
    assert args == ("INSERT",)
    assert kwargs["table"] == "messages"
    assert kwargs["filter"] == "channel_id=eq.chan-1"
    assert [e.row_id for e in received] == ["m1"]
    client.remove_channel.assert_awaited_once_with(channel)


def test_handler_failure_is_logged(caplog):
    channel = MagicMock()
    channel.subscribe = AsyncMock()
    client = MagicMock()
    client.channel.return_value = channel

    async def handler(event):
        raise RuntimeError("store exploded")

    async def scenario():
        subscription = await SupabaseRealtimeFeed(client).subscribe("messages:chan-1", [BINDING], handler)
        callback = channel.on_postgres_changes.call_args.kwargs["callback"]
        callback({"data": {"type": "INSERT", "table": "messages", "record": {"id": "m1"}}})
        for _ in range(3):
            await asyncio.sleep(0)
        return subscription

    with caplog.at_level(logging.ERROR, logger="chatgenius.integrations.supabase.realtime"):
        subscription = asyncio.run(scenario())

    assert "Change handler on messages:chan-1 failed: store exploded" in caplog.text
    assert subscription.tasks == set()
