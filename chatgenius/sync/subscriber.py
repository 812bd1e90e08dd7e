"""
Change Subscriber

Keeps one realtime subscription per active context and reconciles the
message store with the change feed. Notifications only carry the bare row,
so inserts and updates trigger a secondary fetch of the joined message.
"""

import logging
from enum import Enum
from typing import Callable, Optional

from chatgenius.integrations.supabase.client import ChatRepositoryError
from chatgenius.models.chat import ContextType, MessageContext
from chatgenius.sync.feed import ChangeBinding, ChangeEvent, ChangeFeed, ChangeType, Subscription
from chatgenius.sync.store import MessageStore

logger = logging.getLogger(__name__)


class SubscriptionState(str, Enum):
    UNSUBSCRIBED = "unsubscribed"
    SUBSCRIBED = "subscribed"


class ChangeSubscriber:
    """
    Subscribes a MessageStore to the message change feed of one context.

    ``on_change`` is invoked after every store mutation caused by the feed
    (e.g. to drive the scroll coordinator).
    """

    def __init__(
        self,
        feed: ChangeFeed,
        repository,
        store: MessageStore,
        on_change: Optional[Callable[[ChangeEvent], None]] = None,
    ):
        self.feed = feed
        self.repository = repository
        self.store = store
        self.on_change = on_change
        self.context: Optional[MessageContext] = None
        self.state = SubscriptionState.UNSUBSCRIBED
        self._subscription: Optional[Subscription] = None

    @staticmethod
    def bindings_for(context: MessageContext) -> list:
        row_filter = context.realtime_filter()
        return [
            ChangeBinding(event=ChangeType.INSERT, table="messages", filter=row_filter),
            ChangeBinding(event=ChangeType.UPDATE, table="messages", filter=row_filter),
            ChangeBinding(event=ChangeType.DELETE, table="messages", filter=row_filter),
        ]

    async def subscribe(self, context: MessageContext) -> None:
        """Subscribe to a context, replacing any current subscription."""
        await self.unsubscribe()
        if not context.id:
            return

        self.context = context
        self._subscription = await self.feed.subscribe(
            f"messages:{context.id}", self.bindings_for(context), self.handle_event
        )
        self.state = SubscriptionState.SUBSCRIBED
        logger.info(f"Subscribed to {context.type.value} {context.id}")

    async def unsubscribe(self) -> None:
        if self._subscription is not None:
            subscription, self._subscription = self._subscription, None
            await subscription.unsubscribe()
            logger.info(f"Unsubscribed from {self.context.type.value} {self.context.id}")
        self.context = None
        self.state = SubscriptionState.UNSUBSCRIBED

    async def handle_event(self, event: ChangeEvent) -> None:
        """Apply one change notification to the store."""
        context = self.context
        if context is None or not event.row_id:
            return

        if event.type == ChangeType.DELETE:
            self.store.apply_delete(event.row_id)
            self._notify(event)
            return

        # Thread views only track replies to their parent
        if (
            event.type == ChangeType.UPDATE
            and context.type == ContextType.THREAD
            and event.record.get("parent_message_id") != context.id
        ):
            return

        try:
            message = await self.repository.get_message(event.row_id)
        except ChatRepositoryError as e:
            logger.error(f"Failed to fetch message {event.row_id} after {event.type.value}: {e}")
            self.store.error = str(e)
            return

        # Context may have changed while fetching
        if message is None or self.context != context or not context.contains(message):
            return

        if event.type == ChangeType.INSERT:
            self.store.apply_insert(message)
        else:
            self.store.apply_update(message)
        self._notify(event)

    def _notify(self, event: ChangeEvent) -> None:
        if self.on_change is not None:
            self.on_change(event)
