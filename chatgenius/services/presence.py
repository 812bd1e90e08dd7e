"""
Presence Tracker

Keeps the current user's status and last_seen up to date and mirrors other
users' statuses from the users change feed.

Visibility hidden and window blur mean away, visible and focus mean online,
and shutdown means offline. While running, a heartbeat refreshes last_seen.
"""

import asyncio
import logging
from datetime import datetime
from typing import Dict, Optional

from chatgenius.config import Settings, get_settings
from chatgenius.integrations.supabase.client import ChatRepositoryError
from chatgenius.integrations.supabase.workspace import WorkspaceRepository
from chatgenius.models.chat import UserStatus
from chatgenius.sync.feed import ChangeBinding, ChangeEvent, ChangeFeed, ChangeType, Subscription

logger = logging.getLogger(__name__)


class PresenceTracker:
    def __init__(
        self,
        repository: WorkspaceRepository,
        user_id: str,
        feed: Optional[ChangeFeed] = None,
        settings: Optional[Settings] = None,
    ):
        self.repository = repository
        self.user_id = user_id
        self.feed = feed
        self.settings = settings or get_settings()

        self.status = UserStatus.OFFLINE
        self.last_seen: Optional[datetime] = None
        self.statuses: Dict[str, UserStatus] = {}

        self._heartbeat: Optional[asyncio.Task] = None
        self._subscription: Optional[Subscription] = None

    async def set_status(self, status: UserStatus) -> None:
        """Write the current user's status; failures are logged and the local status kept."""
        try:
            self.last_seen = await self.repository.update_user_status(self.user_id, status)
        except ChatRepositoryError as e:
            logger.error(f"Failed to update status to {status.value}: {e}")
            return
        self.status = status

    async def on_visibility_change(self, hidden: bool) -> None:
        await self.set_status(UserStatus.AWAY if hidden else UserStatus.ONLINE)

    async def on_focus(self) -> None:
        await self.set_status(UserStatus.ONLINE)

    async def on_blur(self) -> None:
        await self.set_status(UserStatus.AWAY)

    async def start(self) -> None:
        """Go online, start the heartbeat and listen for other users' changes."""
        await self.set_status(UserStatus.ONLINE)
        if self._heartbeat is None:
            self._heartbeat = asyncio.create_task(self._heartbeat_loop())
        if self.feed is not None and self._subscription is None:
            self._subscription = await self.feed.subscribe(
                "presence",
                [ChangeBinding(ChangeType.UPDATE, "users")],
                self.apply_user_change,
            )

    async def go_offline(self) -> None:
        """Stop background work and mark the user offline."""
        if self._heartbeat is not None:
            self._heartbeat.cancel()
            self._heartbeat = None
        if self._subscription is not None:
            await self._subscription.unsubscribe()
            self._subscription = None
        await self.set_status(UserStatus.OFFLINE)

    async def _heartbeat_loop(self) -> None:
        while True:
            await asyncio.sleep(self.settings.presence_heartbeat_seconds)
            await self.set_status(self.status)

    async def apply_user_change(self, event: ChangeEvent) -> None:
        """Track status changes of other users."""
        record = event.record
        user_id = record.get("id")
        if not user_id or user_id == self.user_id:
            return
        try:
            self.statuses[user_id] = UserStatus(record.get("status"))
        except ValueError:
            logger.debug(f"Ignoring unknown status {record.get('status')!r} for {user_id}")
