"""
Workspace Repository

Channels, reactions, DM conversations and user rows (presence, bot personas).
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from supabase import AsyncClient

from chatgenius.models.chat import Channel, UserStatus
from chatgenius.integrations.supabase.client import (
    UNIQUE_VIOLATION,
    ChatRepositoryError,
    execute,
)
from chatgenius.integrations.supabase.queries import CHANNEL_SELECT, CONVERSATION_SELECT
from chatgenius.integrations.supabase.transformers import DataTransformer

logger = logging.getLogger(__name__)


class WorkspaceRepository:
    """Supabase access for everything around messages."""

    def __init__(self, client: AsyncClient):
        self.client = client

    # Channels

    async def list_channels(self) -> List[Channel]:
        response = await execute(
            self.client.table("channels").select(CHANNEL_SELECT).order("name"),
            "list channels",
        )
        return [DataTransformer.to_channel(row) for row in response.data or []]

    async def get_channel(self, channel_id: str) -> Optional[Channel]:
        response = await execute(
            self.client.table("channels").select(CHANNEL_SELECT).eq("id", channel_id).limit(1),
            "fetch channel",
        )
        rows = response.data or []
        return DataTransformer.to_channel(rows[0]) if rows else None

    async def create_channel(self, name: str, description: Optional[str] = None) -> Channel:
        response = await execute(
            self.client.table("channels").insert({"name": name, "description": description}),
            "create channel",
        )
        if not response.data:
            raise ChatRepositoryError("create channel", "no row returned")
        return DataTransformer.to_channel(response.data[0])

    async def delete_channel(self, channel_id: str) -> None:
        await execute(
            self.client.table("channels").delete().eq("id", channel_id),
            "delete channel",
        )

    # Reactions

    async def find_reaction(self, message_id: str, user_id: str, emoji: str) -> Optional[str]:
        response = await execute(
            self.client.table("reactions")
            .select("id")
            .match({"message_id": message_id, "user_id": user_id, "emoji": emoji})
            .limit(1),
            "find reaction",
        )
        rows = response.data or []
        return rows[0]["id"] if rows else None

    async def add_reaction(self, message_id: str, user_id: str, emoji: str) -> bool:
        """Insert a reaction. Returns False if the same reaction already existed."""
        try:
            await execute(
                self.client.table("reactions").insert(
                    {"message_id": message_id, "user_id": user_id, "emoji": emoji}
                ),
                "add reaction",
            )
        except ChatRepositoryError as e:
            if e.code == UNIQUE_VIOLATION:
                logger.debug(f"Reaction {emoji} on {message_id} already present")
                return False
            raise
        return True

    async def remove_reaction(self, message_id: str, user_id: str, emoji: str) -> None:
        await execute(
            self.client.table("reactions")
            .delete()
            .match({"message_id": message_id, "user_id": user_id, "emoji": emoji}),
            "remove reaction",
        )

    # DM conversations

    async def find_conversation(
        self, user1_id: str, user2_id: str, is_ai_chat: bool
    ) -> Optional[str]:
        response = await execute(
            self.client.table("dm_conversations")
            .select("id")
            .eq("user1_id", user1_id)
            .eq("user2_id", user2_id)
            .eq("is_ai_chat", is_ai_chat)
            .limit(1),
            "find conversation",
        )
        rows = response.data or []
        return rows[0]["id"] if rows else None

    async def create_conversation(self, user1_id: str, user2_id: str, is_ai_chat: bool) -> str:
        response = await execute(
            self.client.table("dm_conversations").insert(
                {"user1_id": user1_id, "user2_id": user2_id, "is_ai_chat": is_ai_chat}
            ),
            "create conversation",
        )
        if not response.data:
            raise ChatRepositoryError("create conversation", "no row returned")
        return response.data[0]["id"]

    async def list_conversation_rows(self, user_id: str) -> List[Dict[str, Any]]:
        response = await execute(
            self.client.table("dm_conversations")
            .select(CONVERSATION_SELECT)
            .or_(f"user1_id.eq.{user_id},user2_id.eq.{user_id}")
            .order("updated_at", desc=True),
            "list conversations",
        )
        return response.data or []

    async def get_conversation_row(self, conversation_id: str) -> Optional[Dict[str, Any]]:
        response = await execute(
            self.client.table("dm_conversations")
            .select(CONVERSATION_SELECT)
            .eq("id", conversation_id)
            .limit(1),
            "fetch conversation",
        )
        rows = response.data or []
        return rows[0] if rows else None

    # Users

    async def find_bot_user(self, owner_id: str) -> Optional[str]:
        response = await execute(
            self.client.table("users")
            .select("id")
            .eq("bot_owner_id", owner_id)
            .eq("is_bot", True)
            .limit(1),
            "find bot user",
        )
        rows = response.data or []
        return rows[0]["id"] if rows else None

    async def create_bot_user(self, owner_id: str) -> str:
        response = await execute(
            self.client.rpc("create_bot_user", {"owner_id": owner_id}),
            "create bot user",
        )
        if not response.data:
            raise ChatRepositoryError("create bot user", "no bot id returned")
        return response.data

    async def update_user_status(self, user_id: str, status: UserStatus) -> datetime:
        """Write status and last_seen for a user. Returns the last_seen written."""
        last_seen = datetime.now(timezone.utc)
        await execute(
            self.client.table("users")
            .update({"status": status.value, "last_seen": last_seen.isoformat()})
            .eq("id", user_id),
            "update user status",
        )
        return last_seen
