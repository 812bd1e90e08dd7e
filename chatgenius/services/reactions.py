"""
Reaction Service

Emoji reactions of the current user on a message. The store picks up the
resulting message UPDATE through the change feed.
"""

import logging

from chatgenius.integrations.supabase.workspace import WorkspaceRepository

logger = logging.getLogger(__name__)


class ReactionService:
    def __init__(self, repository: WorkspaceRepository, user_id: str):
        self.repository = repository
        self.user_id = user_id

    async def add(self, message_id: str, emoji: str) -> bool:
        """Add a reaction; adding the same one twice is a no-op (returns False)."""
        return await self.repository.add_reaction(message_id, self.user_id, emoji)

    async def remove(self, message_id: str, emoji: str) -> None:
        await self.repository.remove_reaction(message_id, self.user_id, emoji)

    async def toggle(self, message_id: str, emoji: str) -> bool:
        """
        Remove the reaction if the user already placed it, otherwise add it.

        Returns:
            True if the reaction is present afterwards
        """
        existing = await self.repository.find_reaction(message_id, self.user_id, emoji)
        if existing:
            await self.repository.remove_reaction(message_id, self.user_id, emoji)
            logger.debug(f"Removed {emoji} from {message_id}")
            return False

        await self.repository.add_reaction(message_id, self.user_id, emoji)
        logger.debug(f"Added {emoji} to {message_id}")
        return True
