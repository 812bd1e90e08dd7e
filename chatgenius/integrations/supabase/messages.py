"""
Message Repository

Reads and writes the messages, files and message_embedding_status tables:
- Paginated context reads (channel, DM, thread), newest first
- Single joined message reads used after change notifications
- Message + file attachment writes with compensating delete
- Bulk reads for embedding, export and AI persona history
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from supabase import AsyncClient

from chatgenius.models.chat import ContextType, FileMetadata, Message, MessageContext
from chatgenius.integrations.supabase.client import ChatRepositoryError, execute
from chatgenius.integrations.supabase.queries import MESSAGE_SELECT
from chatgenius.integrations.supabase.transformers import DataTransformer

logger = logging.getLogger(__name__)


@dataclass
class MessagePage:
    """One page of a context's messages in ascending (display) order."""

    messages: List[Message]
    cursor: Optional[str]  # created_at of the oldest row, for the next page
    has_more: bool


class MessageRepository:
    """Supabase access for chat messages."""

    def __init__(self, client: AsyncClient):
        self.client = client

    def _context_query(self, context: MessageContext):
        query = self.client.table("messages").select(MESSAGE_SELECT)

        if context.type == ContextType.THREAD:
            return query.eq("parent_message_id", context.id)

        other_column = (
            "conversation_id" if context.type == ContextType.CHANNEL else "channel_id"
        )
        return (
            query.eq(context.filter_column, context.id)
            .is_("parent_message_id", "null")
            .is_(other_column, "null")
        )

    async def fetch_page(
        self, context: MessageContext, limit: int, before: Optional[str] = None
    ) -> MessagePage:
        """
        Fetch the most recent ``limit`` messages of a context.

        Args:
            context: Channel, DM or thread to read
            limit: Page size
            before: Only return messages created strictly before this timestamp

        Returns:
            MessagePage with messages in ascending order
        """
        query = self._context_query(context)
        if before:
            query = query.lt("created_at", before)
        query = query.order("created_at", desc=True).limit(limit)

        logger.debug(
            f"Fetching messages for {context.type.value} {context.id}, before={before}, limit={limit}"
        )
        response = await execute(query, "fetch messages")
        rows = response.data or []

        if not rows:
            return MessagePage(messages=[], cursor=None, has_more=False)

        messages = [m for m in (DataTransformer.to_message(r) for r in rows) if m]
        messages.reverse()

        return MessagePage(
            messages=messages,
            cursor=rows[-1]["created_at"],
            has_more=len(rows) == limit,
        )

    async def get_message(self, message_id: str) -> Optional[Message]:
        """Fetch one fully joined message, or None if it no longer exists."""
        query = (
            self.client.table("messages")
            .select(MESSAGE_SELECT)
            .eq("id", message_id)
            .limit(1)
        )
        response = await execute(query, "fetch message")
        rows = response.data or []
        if not rows:
            return None
        return DataTransformer.to_message(rows[0])

    async def create_message(
        self,
        context: MessageContext,
        user_id: str,
        content: str,
        file: Optional[FileMetadata] = None,
    ) -> Message:
        """
        Durably write a message (and its file record) to a context.

        If the file record cannot be stored, the message row is deleted again
        and the error is re-raised.

        Returns:
            The fully joined, server-confirmed message

        Raises:
            ChatRepositoryError: If any write or the confirming read fails
        """
        record: Dict[str, Any] = {"content": content, "user_id": user_id}
        record.update(context.target_columns())

        response = await execute(
            self.client.table("messages").insert(record), "insert message"
        )
        if not response.data:
            raise ChatRepositoryError("insert message", "no row returned")
        message_id = response.data[0]["id"]

        if file:
            try:
                await execute(
                    self.client.table("files").insert(file.to_record(message_id, user_id)),
                    "insert file record",
                )
            except ChatRepositoryError:
                logger.error(f"File record failed, removing message {message_id}")
                await execute(
                    self.client.table("messages").delete().eq("id", message_id),
                    "delete message",
                )
                raise

        message = await self.get_message(message_id)
        if message is None:
            raise ChatRepositoryError("fetch message", f"message {message_id} not readable")
        return message

    async def insert_bot_message(
        self, conversation_id: str, bot_user_id: str, content: str
    ) -> Optional[str]:
        """Insert a top-level DM message authored by a bot user. Returns its id."""
        response = await execute(
            self.client.table("messages").insert(
                {
                    "content": content,
                    "user_id": bot_user_id,
                    "conversation_id": conversation_id,
                    "channel_id": None,
                    "parent_message_id": None,
                }
            ),
            "insert bot message",
        )
        return response.data[0]["id"] if response.data else None

    async def fetch_all(self, columns: str = "id, user_id, content, created_at") -> List[Dict[str, Any]]:
        """All message rows in ascending creation order."""
        query = (
            self.client.table("messages")
            .select(columns)
            .order("created_at", desc=False)
        )
        response = await execute(query, "fetch all messages")
        return response.data or []

    async def fetch_user_history(self, user_id: str, limit: int) -> List[Dict[str, Any]]:
        """Most recent messages written by a user across channels and DMs."""
        query = (
            self.client.table("messages")
            .select("content, created_at, channel_id, conversation_id")
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .limit(limit)
        )
        response = await execute(query, "fetch user history")
        return response.data or []

    async def fetch_unembedded(self, batch_size: int) -> List[Dict[str, Any]]:
        """Messages without an entry in message_embedding_status."""
        status_response = await execute(
            self.client.table("message_embedding_status").select("message_id"),
            "fetch embedding status",
        )
        done_ids = [row["message_id"] for row in status_response.data or []]

        query = self.client.table("messages").select("id, content, user_id, created_at")
        if done_ids:
            query = query.not_.in_("id", done_ids)
        response = await execute(query.limit(batch_size), "fetch unembedded messages")
        return response.data or []

    async def record_embedding_status(
        self, message_id: str, status: str, error_message: Optional[str] = None
    ) -> None:
        record = {
            "message_id": message_id,
            "status": status,
            "processed_at": datetime.now(timezone.utc).isoformat(),
        }
        if error_message is not None:
            record["error_message"] = error_message
        await execute(
            self.client.table("message_embedding_status").insert(record),
            "record embedding status",
        )
