"""
Chat Domain Models

Platform records (users, channels, messages, reactions, files, DM conversations)
as they are used by the client after joined rows have been transformed.
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator
from datetime import datetime
from enum import Enum
from typing import List, Optional, Dict, Any


class UserStatus(str, Enum):
    """Presence status of a user."""

    ONLINE = "online"
    AWAY = "away"
    OFFLINE = "offline"


class ContextType(str, Enum):
    """Conversation context a message list belongs to."""

    CHANNEL = "channel"
    DM = "dm"
    THREAD = "thread"


class User(BaseModel):
    """Chat user (human or AI persona bot)."""

    id: str
    username: str
    full_name: str
    status: UserStatus = UserStatus.OFFLINE
    last_seen: Optional[datetime] = None
    is_bot: bool = False
    bot_owner_id: Optional[str] = None


class Reaction(BaseModel):
    """Emoji reaction left by a user on a message."""

    id: str
    emoji: str
    user: User


class FileMetadata(BaseModel):
    """Metadata of an uploaded file, attached to an outgoing message."""

    bucket_path: str
    file_name: str
    file_size: int = Field(..., ge=0)
    content_type: str
    is_image: bool = False
    image_width: Optional[int] = None
    image_height: Optional[int] = None

    def to_record(self, message_id: str, user_id: str) -> Dict[str, Any]:
        """Row for the files table; image dimensions only for images."""
        record = {
            "message_id": message_id,
            "user_id": user_id,
            "bucket_path": self.bucket_path,
            "file_name": self.file_name,
            "file_size": self.file_size,
            "content_type": self.content_type,
            "is_image": self.is_image,
        }
        if self.is_image:
            record["image_width"] = self.image_width
            record["image_height"] = self.image_height
        return record


class FileAttachment(FileMetadata):
    """File attachment stored alongside a message."""

    id: Optional[str] = None  # None while the message is still pending
    message_id: Optional[str] = None
    user_id: Optional[str] = None
    created_at: Optional[datetime] = None


class ThreadParticipant(BaseModel):
    id: str
    thread_id: Optional[str] = None
    user_id: str
    last_read_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    user: Optional[User] = None


class Message(BaseModel):
    """
    A chat message.

    A message belongs to exactly one top-level context (channel or DM). Replies
    carry the parent's top-level reference plus parent_message_id.
    """

    id: str
    content: str
    created_at: datetime
    channel_id: Optional[str] = None
    conversation_id: Optional[str] = None
    parent_message_id: Optional[str] = None
    user: User
    reactions: List[Reaction] = []
    file: Optional[FileAttachment] = None
    reply_count: int = 0
    latest_reply_at: Optional[datetime] = None
    is_thread_parent: bool = False
    thread_participants: Optional[List[ThreadParticipant]] = None

    @model_validator(mode="after")
    def _check_single_context(self) -> "Message":
        if bool(self.channel_id) == bool(self.conversation_id):
            raise ValueError(
                "message must reference exactly one of channel_id or conversation_id"
            )
        return self


class Channel(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None


class DMConversation(BaseModel):
    """Two-party conversation; user ids are stored in sorted order."""

    id: str
    user1_id: str
    user2_id: str
    is_ai_chat: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    user1: Optional[User] = None
    user2: Optional[User] = None
    other_user: Optional[User] = None


class MessageContext(BaseModel):
    """
    Identifies the message list being displayed.

    For threads, ``id`` is the parent message id and the parent's top-level
    channel/conversation is needed to address replies.
    """

    model_config = ConfigDict(frozen=True)

    type: ContextType
    id: Optional[str] = None
    parent_channel_id: Optional[str] = None
    parent_conversation_id: Optional[str] = None

    @model_validator(mode="after")
    def _check_thread_parent(self) -> "MessageContext":
        if (
            self.type == ContextType.THREAD
            and self.id
            and bool(self.parent_channel_id) == bool(self.parent_conversation_id)
        ):
            raise ValueError(
                "thread context needs exactly one of parent_channel_id or parent_conversation_id"
            )
        return self

    @property
    def filter_column(self) -> str:
        if self.type == ContextType.THREAD:
            return "parent_message_id"
        if self.type == ContextType.CHANNEL:
            return "channel_id"
        return "conversation_id"

    def realtime_filter(self) -> str:
        """Server-side change feed filter, e.g. ``channel_id=eq.<id>``."""
        return f"{self.filter_column}=eq.{self.id}"

    def contains(self, message: Message) -> bool:
        """Check whether a message belongs in this context's list."""
        if not self.id:
            return False
        if self.type == ContextType.THREAD:
            return message.parent_message_id == self.id
        if message.parent_message_id:
            return False
        if self.type == ContextType.CHANNEL:
            return message.channel_id == self.id
        return message.conversation_id == self.id

    def target_columns(self) -> Dict[str, Optional[str]]:
        """Columns addressing a new message to this context."""
        if self.type == ContextType.THREAD:
            return {
                "parent_message_id": self.id,
                "channel_id": self.parent_channel_id,
                "conversation_id": self.parent_conversation_id,
            }
        return {self.filter_column: self.id}
