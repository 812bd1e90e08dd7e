"""
Message Session

Binds one conversation context to its store, fetcher, optimistic writer,
change subscriber and scroll coordinator. This is what a chat view talks to:

    session = MessageSession(repository, feed, user)
    await session.open(MessageContext(type=ContextType.CHANNEL, id=channel_id))
    await session.send("hello")
    await session.load_more()
    await session.close()

The view reports scroll positions with ``on_scroll`` and, after rendering,
asks ``after_render`` where to scroll (None leaves the position alone).
"""

import logging
from typing import List, Optional

from chatgenius.config import Settings, get_settings
from chatgenius.integrations.supabase.client import ChatRepositoryError
from chatgenius.models.chat import FileMetadata, Message, MessageContext, User
from chatgenius.sync.feed import ChangeEvent, ChangeFeed
from chatgenius.sync.scroll import ScrollCoordinator, ScrollMetrics
from chatgenius.sync.store import MessageStore, StoreEntry
from chatgenius.sync.subscriber import ChangeSubscriber
from chatgenius.sync.writer import OptimisticWriter

logger = logging.getLogger(__name__)


class MessageSession:
    """Message list state for the currently displayed context."""

    def __init__(
        self,
        repository,
        feed: ChangeFeed,
        user: User,
        settings: Optional[Settings] = None,
    ):
        self.repository = repository
        self.user = user
        self.settings = settings or get_settings()

        self.store = MessageStore()
        self.scroll = ScrollCoordinator(self.settings.scroll_threshold)
        self.subscriber = ChangeSubscriber(
            feed, repository, self.store, on_change=self._on_feed_change
        )
        self.writer: Optional[OptimisticWriter] = None

        self.context: Optional[MessageContext] = None
        self.is_loading = False
        self.is_loading_more = False
        self.has_more = False
        self.cursor: Optional[str] = None
        self._generation = 0
        self._needs_scroll_check = False

    @property
    def messages(self) -> List[Message]:
        return self.store.messages

    @property
    def error(self) -> Optional[str]:
        return self.store.error

    async def open(self, context: MessageContext) -> None:
        """Load the latest page of a context and start listening for changes."""
        self._generation += 1
        generation = self._generation
        self.context = context
        self.store.reset()
        self.cursor = None
        self.scroll.reset()
        self.has_more = False
        self.writer = OptimisticWriter(
            self.store, self.repository, context, self.user, self.settings
        )

        if not context.id:
            logger.debug("No context id provided, skipping fetch")
            self.is_loading = False
            await self.subscriber.unsubscribe()
            return

        await self.subscriber.subscribe(context)
        await self._fetch_latest(generation)

    async def _fetch_latest(self, generation: int) -> None:
        self.is_loading = True
        try:
            page = await self.repository.fetch_page(
                self.context, self.settings.messages_per_page
            )
        except ChatRepositoryError as e:
            if generation == self._generation:
                logger.error(f"Error fetching messages: {e}")
                self.store.error = str(e)
            return
        finally:
            if generation == self._generation:
                self.is_loading = False

        if generation != self._generation:
            logger.debug("Discarding stale page for a previous context")
            return

        self.store.load_latest(page.messages)
        self.cursor = page.cursor
        self.has_more = page.has_more
        self._needs_scroll_check = True

    async def load_more(self) -> None:
        """Fetch the next older page and put it in front of the list."""
        if (
            not self.context
            or not self.context.id
            or self.is_loading_more
            or not self.has_more
            or not self.cursor
        ):
            return

        generation = self._generation
        self.is_loading_more = True
        try:
            page = await self.repository.fetch_page(
                self.context, self.settings.messages_per_page, before=self.cursor
            )
        except ChatRepositoryError as e:
            if generation == self._generation:
                logger.error(f"Error loading more messages: {e}")
                self.store.error = str(e)
            return
        finally:
            self.is_loading_more = False

        if generation != self._generation:
            return

        self.store.prepend_older(page.messages)
        self.has_more = page.has_more
        if page.cursor:
            self.cursor = page.cursor

    async def send(self, content: str, file: Optional[FileMetadata] = None) -> Optional[StoreEntry]:
        """Send through the optimistic writer. See OptimisticWriter.send."""
        if self.writer is None or not self.context or not self.context.id:
            return None
        self._needs_scroll_check = True
        return await self.writer.send(content, file)

    async def resend(self, local_id: str) -> Optional[StoreEntry]:
        if self.writer is None:
            return None
        self._needs_scroll_check = True
        return await self.writer.resend(local_id)

    async def switch_context(self, context: MessageContext) -> None:
        if context == self.context:
            return
        await self.open(context)

    async def close(self) -> None:
        self._generation += 1
        await self.subscriber.unsubscribe()
        self.context = None
        self.writer = None

    # Scroll coordination

    def on_scroll(self, metrics: ScrollMetrics) -> None:
        self.scroll.on_scroll(metrics)

    def after_render(self, metrics: ScrollMetrics) -> Optional[float]:
        """
        Called by the view after the list was re-rendered.

        Returns:
            The scroll_top to re-pin to, or None
        """
        if not self._needs_scroll_check:
            return None
        self._needs_scroll_check = False
        return self.scroll.after_mutation(metrics)

    def _on_feed_change(self, event: ChangeEvent) -> None:
        logger.debug(f"Feed {event.type.value} for message {event.row_id}")
        self._needs_scroll_check = True
