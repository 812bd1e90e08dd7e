"""
Row → model transformation for joined Supabase reads.

Joined relations arrive either as a single object or a one-element list
depending on the relationship; both are accepted. Missing author data falls
back to a placeholder user instead of dropping the message.
"""

import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from chatgenius.models.chat import (
    User,
    UserStatus,
    Reaction,
    FileAttachment,
    ThreadParticipant,
    Message,
    Channel,
    DMConversation,
)

logger = logging.getLogger(__name__)


def _first(value: Any) -> Optional[Dict[str, Any]]:
    """Unwrap a joined relation that may be a dict, a list, or missing."""
    if isinstance(value, list):
        return value[0] if value else None
    return value or None


class DataTransformer:
    """Converts database rows into chat models."""

    @staticmethod
    def to_user(row: Optional[Dict[str, Any]], fallback_id: Optional[str] = None) -> User:
        if not row:
            return User(
                id=fallback_id or "unknown",
                username="Unknown",
                full_name="Unknown User",
                status=UserStatus.OFFLINE,
            )

        return User(
            id=row["id"],
            username=row.get("username") or "Unknown",
            full_name=row.get("full_name") or row.get("username") or "Unknown User",
            status=row.get("status") or UserStatus.OFFLINE,
            last_seen=row.get("last_seen"),
            is_bot=row.get("is_bot") or False,
            bot_owner_id=row.get("bot_owner_id"),
        )

    @staticmethod
    def to_file(row: Dict[str, Any]) -> FileAttachment:
        return FileAttachment(
            id=row.get("id"),
            message_id=row.get("message_id"),
            user_id=row.get("user_id"),
            bucket_path=row["bucket_path"],
            file_name=row["file_name"],
            file_size=row.get("file_size") or 0,
            content_type=row.get("content_type") or "application/octet-stream",
            is_image=row.get("is_image") or False,
            image_width=row.get("image_width") or None,
            image_height=row.get("image_height") or None,
            created_at=row.get("created_at"),
        )

    @classmethod
    def to_reaction(cls, row: Dict[str, Any]) -> Optional[Reaction]:
        user = _first(row.get("users"))
        if not user:
            return None
        return Reaction(id=row["id"], emoji=row["emoji"], user=cls.to_user(user))

    @classmethod
    def to_thread_participant(
        cls, row: Dict[str, Any], thread_id: Optional[str] = None
    ) -> ThreadParticipant:
        user = _first(row.get("users"))
        return ThreadParticipant(
            id=row["id"],
            thread_id=row.get("thread_id") or thread_id,
            user_id=row["user_id"],
            last_read_at=row.get("last_read_at"),
            created_at=row.get("created_at"),
            user=cls.to_user(user) if user else None,
        )

    @classmethod
    def to_message(cls, row: Dict[str, Any]) -> Optional[Message]:
        """
        Transform a MESSAGE_SELECT row.

        Returns None only when the row itself is malformed (e.g. it names
        both or neither of channel and conversation).
        """
        user = _first(row.get("users"))
        reactions = [
            reaction
            for reaction in (cls.to_reaction(r) for r in row.get("reactions") or [])
            if reaction is not None
        ]
        file_row = _first(row.get("files"))
        participants = row.get("thread_participants")

        try:
            return Message(
                id=row["id"],
                content=row.get("content") or "",
                created_at=row["created_at"],
                channel_id=row.get("channel_id"),
                conversation_id=row.get("conversation_id"),
                parent_message_id=row.get("parent_message_id"),
                user=cls.to_user(user, fallback_id=row.get("user_id")),
                reactions=reactions,
                file=cls.to_file(file_row) if file_row else None,
                reply_count=row.get("reply_count") or 0,
                latest_reply_at=row.get("latest_reply_at"),
                is_thread_parent=row.get("is_thread_parent") or False,
                thread_participants=(
                    [cls.to_thread_participant(p, row["id"]) for p in participants]
                    if participants is not None
                    else None
                ),
            )
        except (KeyError, ValidationError) as e:
            logger.warning(f"Skipping malformed message row {row.get('id')}: {e}")
            return None

    @staticmethod
    def to_channel(row: Dict[str, Any]) -> Channel:
        return Channel(
            id=row["id"],
            name=row["name"],
            description=row.get("description"),
            created_at=row.get("created_at"),
        )

    @classmethod
    def to_conversation(
        cls, row: Dict[str, Any], current_user_id: Optional[str] = None
    ) -> Optional[DMConversation]:
        """
        Transform a CONVERSATION_SELECT row.

        When ``current_user_id`` is given the row is skipped (None) if the
        other participant's data is missing.
        """
        user1 = _first(row.get("user1"))
        user2 = _first(row.get("user2"))

        other_user = None
        if current_user_id is not None:
            other = user2 if row.get("user1_id") == current_user_id else user1
            if not other:
                logger.warning(f"Missing other user data for conversation {row.get('id')}")
                return None
            other_user = cls.to_user(other)

        return DMConversation(
            id=row["id"],
            user1_id=row["user1_id"],
            user2_id=row["user2_id"],
            is_ai_chat=row.get("is_ai_chat") or False,
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
            user1=cls.to_user(user1) if user1 else None,
            user2=cls.to_user(user2) if user2 else None,
            other_user=other_user,
        )
