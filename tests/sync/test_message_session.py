"""
Unit tests for MessageSession: loading, pagination, context switches and
scroll coordination.
"""

import asyncio
from unittest.mock import AsyncMock

from conftest import FakeFeed, make_message

from chatgenius.integrations.supabase.client import ChatRepositoryError
from chatgenius.integrations.supabase.messages import MessagePage
from chatgenius.models.chat import ContextType, MessageContext
from chatgenius.sync.feed import ChangeEvent, ChangeType
from chatgenius.sync.scroll import ScrollMetrics
from chatgenius.sync.session import MessageSession


def page(*messages, has_more=False):
    messages = list(messages)
    return MessagePage(
        messages=messages,
        cursor=messages[0].created_at.isoformat() if messages else None,
        has_more=has_more,
    )


def test_open_loads_latest_page_and_subscribes(user, settings, channel_context):
    repository = AsyncMock()
    repository.fetch_page.return_value = page(make_message("a"), make_message("b", minutes=1), has_more=True)
    feed = FakeFeed()
    session = MessageSession(repository, feed, user, settings)

    asyncio.run(session.open(channel_context))

    assert [m.id for m in session.messages] == ["a", "b"]
    assert session.has_more is True
    assert session.is_loading is False
    assert [s.topic for s in feed.active] == ["messages:chan-1"]
    repository.fetch_page.assert_awaited_once_with(channel_context, settings.messages_per_page)


def test_open_without_id_skips_fetch(user, settings):
    repository = AsyncMock()
    feed = FakeFeed()
    session = MessageSession(repository, feed, user, settings)

    asyncio.run(session.open(MessageContext(type=ContextType.CHANNEL, id=None)))

    assert session.messages == []
    assert session.is_loading is False
    repository.fetch_page.assert_not_called()
    assert feed.active == []


def test_load_more_prepends_older_page(user, settings, channel_context):
    repository = AsyncMock()
    repository.fetch_page.side_effect = [
        page(make_message("c", minutes=10), make_message("d", minutes=11), has_more=True),
        page(make_message("a", minutes=1), make_message("b", minutes=2), has_more=False),
    ]
    session = MessageSession(repository, FakeFeed(), user, settings)

    asyncio.run(session.open(channel_context))
    cursor = session.cursor
    asyncio.run(session.load_more())

    assert [m.id for m in session.messages] == ["a", "b", "c", "d"]
    assert session.has_more is False
    assert repository.fetch_page.await_args.kwargs["before"] == cursor


def test_load_more_without_more_pages_is_noop(user, settings, channel_context):
    repository = AsyncMock()
    repository.fetch_page.return_value = page(make_message("a"), has_more=False)
    session = MessageSession(repository, FakeFeed(), user, settings)

    asyncio.run(session.open(channel_context))
    asyncio.run(session.load_more())

    assert repository.fetch_page.await_count == 1


def test_stale_page_from_previous_context_is_discarded(user, settings):
    """Switching away while a fetch is in flight must not show the old context's page."""
    first = MessageContext(type=ContextType.CHANNEL, id="chan-1")
    second = MessageContext(type=ContextType.CHANNEL, id="chan-2")

    async def scenario():
        release_first = asyncio.Event()

        async def fetch_page(context, limit, before=None):
            if context.id == "chan-1":
                await release_first.wait()
                return page(make_message("old", channel_id="chan-1"))
            return page(make_message("new", channel_id="chan-2"))

        repository = AsyncMock()
        repository.fetch_page.side_effect = fetch_page
        session = MessageSession(repository, FakeFeed(), user, settings)

        opening_first = asyncio.create_task(session.open(first))
        await asyncio.sleep(0)
        await session.open(second)
        release_first.set()
        await opening_first
        return session

    session = asyncio.run(scenario())

    assert session.context.id == "chan-2"
    assert [m.id for m in session.messages] == ["new"]


def test_fetch_error_is_exposed(user, settings, channel_context):
    repository = AsyncMock()
    repository.fetch_page.side_effect = ChatRepositoryError("fetch messages", "offline")
    session = MessageSession(repository, FakeFeed(), user, settings)

    asyncio.run(session.open(channel_context))

    assert "offline" in session.error
    assert session.is_loading is False


def test_send_uses_current_context(user, settings, channel_context):
    repository = AsyncMock()
    repository.fetch_page.return_value = page()
    repository.create_message.return_value = make_message("srv-1", content="hi")
    session = MessageSession(repository, FakeFeed(), user, settings)

    asyncio.run(session.open(channel_context))
    asyncio.run(session.send("hi"))

    assert [m.id for m in session.messages] == ["srv-1"]
    assert repository.create_message.await_args.args[0] == channel_context


def test_feed_insert_scrolls_pinned_view(user, settings, channel_context):
    repository = AsyncMock()
    repository.fetch_page.return_value = page(make_message("a"))
    repository.get_message.return_value = make_message("b", minutes=1)
    feed = FakeFeed()
    session = MessageSession(repository, feed, user, settings)

    asyncio.run(session.open(channel_context))
    session.after_render(ScrollMetrics(1000, 500, 500))

    session.on_scroll(ScrollMetrics(1000, 480, 500))
    handler = feed.active[0].handler
    asyncio.run(handler(ChangeEvent(ChangeType.INSERT, "messages", record={"id": "b"})))

    assert session.after_render(ScrollMetrics(1100, 480, 500)) == 600
    # Nothing changed since the last render
    assert session.after_render(ScrollMetrics(1100, 600, 500)) is None


def test_feed_insert_while_scrolled_up_flags_new_messages(user, settings, channel_context):
    repository = AsyncMock()
    repository.fetch_page.return_value = page(make_message("a"))
    repository.get_message.return_value = make_message("b", minutes=1)
    feed = FakeFeed()
    session = MessageSession(repository, feed, user, settings)

    asyncio.run(session.open(channel_context))
    session.after_render(ScrollMetrics(3000, 2500, 500))
    session.on_scroll(ScrollMetrics(3000, 0, 500))

    handler = feed.active[0].handler
    asyncio.run(handler(ChangeEvent(ChangeType.INSERT, "messages", record={"id": "b"})))

    assert session.after_render(ScrollMetrics(3100, 0, 500)) is None
    assert session.scroll.has_new_messages is True


def test_close_unsubscribes(user, settings, channel_context):
    repository = AsyncMock()
    repository.fetch_page.return_value = page()
    feed = FakeFeed()
    session = MessageSession(repository, feed, user, settings)

    asyncio.run(session.open(channel_context))
    asyncio.run(session.close())

    assert feed.active == []
    assert session.context is None


def test_send_failing_after_context_switch_does_not_set_new_error(user, settings):
    first = MessageContext(type=ContextType.CHANNEL, id="chan-1")
    second = MessageContext(type=ContextType.CHANNEL, id="chan-2")

    async def scenario():
        release_write = asyncio.Event()

        async def create_message(context, user_id, content, file=None):
            await release_write.wait()
            raise ChatRepositoryError("insert message", "timeout")

        repository = AsyncMock()
        repository.fetch_page.return_value = page()
        repository.create_message.side_effect = create_message
        session = MessageSession(repository, FakeFeed(), user, settings)

        await session.open(first)
        sending = asyncio.create_task(session.send("hello"))
        await asyncio.sleep(0)
        await session.switch_context(second)
        release_write.set()
        await sending
        return session

    session = asyncio.run(scenario())

    assert session.context.id == "chan-2"
    assert session.error is None
    assert session.messages == []
    assert session.store.failed == {}


def test_open_resets_scroll_state(user, settings):
    repository = AsyncMock()
    repository.fetch_page.return_value = page(make_message("a"))
    session = MessageSession(repository, FakeFeed(), user, settings)

    asyncio.run(session.open(MessageContext(type=ContextType.CHANNEL, id="chan-1")))
    session.on_scroll(ScrollMetrics(3000, 0, 500))
    assert session.scroll.is_at_bottom is False

    asyncio.run(session.open(MessageContext(type=ContextType.CHANNEL, id="chan-2")))

    assert session.scroll.is_at_bottom is True
    assert session.after_render(ScrollMetrics(3000, 0, 500)) == 2500
