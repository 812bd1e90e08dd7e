"""
Supabase Realtime adapter for the sync layer's ChangeFeed protocol.

Realtime invokes listeners synchronously from its receive loop; handlers are
scheduled as tasks on the running loop so a secondary fetch never blocks the
socket.
"""

import asyncio
import logging
from typing import Any, Dict, List, Set

from supabase import AsyncClient

from chatgenius.sync.feed import ChangeBinding, ChangeEvent, ChangeHandler, ChangeType

logger = logging.getLogger(__name__)


def parse_change_payload(payload: Dict[str, Any], binding: ChangeBinding) -> ChangeEvent:
    """Normalize a postgres_changes payload into a ChangeEvent."""
    data = payload.get("data", payload)
    event_type = data.get("type") or data.get("eventType") or binding.event.value
    return ChangeEvent(
        type=ChangeType(event_type),
        table=data.get("table") or binding.table,
        record=data.get("record") or data.get("new") or {},
        old_record=data.get("old_record") or data.get("old") or {},
    )


def _log_handler_failure(task: asyncio.Task, topic: str) -> None:
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.error(
            f"Change handler on {topic} failed: {error}",
            exc_info=(type(error), error, error.__traceback__),
        )


class SupabaseSubscription:
    """Handle for one realtime channel."""

    def __init__(self, client: AsyncClient, channel: Any, topic: str):
        self.client = client
        self.channel = channel
        self.topic = topic
        self.tasks: Set[asyncio.Task] = set()

    async def unsubscribe(self) -> None:
        logger.debug(f"Removing realtime channel {self.topic}")
        await self.client.remove_channel(self.channel)
        for task in self.tasks:
            task.cancel()
        self.tasks.clear()


class SupabaseRealtimeFeed:
    """ChangeFeed backed by Supabase postgres_changes."""

    def __init__(self, client: AsyncClient):
        self.client = client

    async def subscribe(
        self, topic: str, bindings: List[ChangeBinding], handler: ChangeHandler
    ) -> SupabaseSubscription:
        channel = self.client.channel(topic)
        subscription = SupabaseSubscription(self.client, channel, topic)

        for binding in bindings:
            channel.on_postgres_changes(
                binding.event.value,
                callback=self._make_callback(subscription, binding, handler),
                table=binding.table,
                schema=binding.schema,
                filter=binding.filter,
            )

        await channel.subscribe()
        logger.info(f"Subscribed to realtime channel {topic} ({len(bindings)} bindings)")
        return subscription

    @staticmethod
    def _make_callback(
        subscription: SupabaseSubscription, binding: ChangeBinding, handler: ChangeHandler
    ):
        def callback(payload: Dict[str, Any]) -> None:
            try:
                event = parse_change_payload(payload, binding)
            except ValueError as e:
                logger.warning(f"Ignoring unrecognized change payload on {subscription.topic}: {e}")
                return

            task = asyncio.ensure_future(handler(event))
            subscription.tasks.add(task)
            task.add_done_callback(subscription.tasks.discard)
            task.add_done_callback(lambda t: _log_handler_failure(t, subscription.topic))

        return callback
