"""
Shared fixtures for ChatGenius tests.
"""

import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import itertools
from datetime import datetime, timedelta, timezone
from typing import List
from unittest.mock import AsyncMock

import pytest

from chatgenius.config import Settings
from chatgenius.models.chat import ContextType, Message, MessageContext, User, UserStatus

BASE_TIME = datetime(2024, 1, 15, 10, 0, 0, tzinfo=timezone.utc)
_ids = itertools.count(1)


def make_user(user_id: str = "user-1", username: str = "alice") -> User:
    return User(
        id=user_id,
        username=username,
        full_name=username.title(),
        status=UserStatus.ONLINE,
    )


def make_message(
    message_id: str = None,
    content: str = "hello",
    minutes: int = 0,
    channel_id: str = "chan-1",
    conversation_id: str = None,
    parent_message_id: str = None,
    user: User = None,
) -> Message:
    """Build a confirmed message; channel messages unless a conversation is given."""
    return Message(
        id=message_id or f"msg-{next(_ids)}",
        content=content,
        created_at=BASE_TIME + timedelta(minutes=minutes),
        channel_id=None if conversation_id else channel_id,
        conversation_id=conversation_id,
        parent_message_id=parent_message_id,
        user=user or make_user(),
    )


class FakeSubscription:
    def __init__(self, topic: str, bindings, handler):
        self.topic = topic
        self.bindings = bindings
        self.handler = handler
        self.active = True

    async def unsubscribe(self) -> None:
        self.active = False


class FakeFeed:
    """In-memory change feed recording subscriptions."""

    def __init__(self):
        self.subscriptions: List[FakeSubscription] = []

    async def subscribe(self, topic, bindings, handler):
        subscription = FakeSubscription(topic, bindings, handler)
        self.subscriptions.append(subscription)
        return subscription

    @property
    def active(self) -> List[FakeSubscription]:
        return [s for s in self.subscriptions if s.active]


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def user() -> User:
    return make_user()


@pytest.fixture
def channel_context() -> MessageContext:
    return MessageContext(type=ContextType.CHANNEL, id="chan-1")


@pytest.fixture
def feed() -> FakeFeed:
    return FakeFeed()


@pytest.fixture
def repository() -> AsyncMock:
    """Message repository double; configure return values per test."""
    return AsyncMock()
