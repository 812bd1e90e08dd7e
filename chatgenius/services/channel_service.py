"""
Channel Service

Channel listing, validated creation and confirmed deletion.
"""

import logging
from typing import List, Optional

from chatgenius.integrations.supabase.workspace import WorkspaceRepository
from chatgenius.models.chat import Channel
from chatgenius.utils.validators import (
    ChannelNameValidation,
    validate_channel_deletion,
    validate_channel_name,
)

logger = logging.getLogger(__name__)


class ChannelValidationError(Exception):
    """
    Raised when a channel name or deletion confirmation is rejected.
    This is a client error (400).
    """

    def __init__(self, message: str, validation: Optional[ChannelNameValidation] = None):
        super().__init__(message)
        self.validation = validation


class ChannelNotFoundError(Exception):
    """Raised when the channel to delete does not exist (404)."""

    pass


class ChannelService:
    def __init__(self, repository: WorkspaceRepository):
        self.repository = repository

    async def list_channels(self) -> List[Channel]:
        return await self.repository.list_channels()

    async def create_channel(self, name: str, description: Optional[str] = None) -> Channel:
        """
        Create a channel after validating its name against the existing ones.

        Raises:
            ChannelValidationError: If the name is invalid or already taken
        """
        existing = await self.repository.list_channels()
        validation = validate_channel_name(name, existing)
        if not validation.is_valid:
            logger.info(f"Rejected channel name '{name}': {validation.error}")
            raise ChannelValidationError(validation.error, validation)

        description = (description or "").strip() or None
        channel = await self.repository.create_channel(name.lower(), description)
        logger.info(f"Created channel #{channel.name} ({channel.id})")
        return channel

    async def delete_channel(self, channel_id: str, confirmation: str) -> None:
        """
        Delete a channel once the typed confirmation matches its name.

        Raises:
            ChannelNotFoundError: If no channel has this id
            ChannelValidationError: If the confirmation does not match
        """
        channel = await self.repository.get_channel(channel_id)
        if channel is None:
            raise ChannelNotFoundError(f"Channel {channel_id} not found")

        is_valid, message = validate_channel_deletion(confirmation, channel.name)
        if not is_valid:
            raise ChannelValidationError(message)

        await self.repository.delete_channel(channel_id)
        logger.info(f"Deleted channel #{channel.name} ({channel_id})")
