# Shared data models
from chatgenius.models.chat import (
    User,
    UserStatus,
    Reaction,
    FileMetadata,
    FileAttachment,
    ThreadParticipant,
    Message,
    Channel,
    DMConversation,
    ContextType,
    MessageContext,
)

__all__ = [
    "User",
    "UserStatus",
    "Reaction",
    "FileMetadata",
    "FileAttachment",
    "ThreadParticipant",
    "Message",
    "Channel",
    "DMConversation",
    "ContextType",
    "MessageContext",
]
