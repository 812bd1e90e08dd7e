"""
Conversation Service

Direct message conversations, including AI chats with a user's bot persona.
"""

import logging
from typing import List, Optional, Tuple

from chatgenius.integrations.supabase.transformers import DataTransformer
from chatgenius.integrations.supabase.workspace import WorkspaceRepository
from chatgenius.models.chat import DMConversation

logger = logging.getLogger(__name__)


def ordered_pair(user_a: str, user_b: str) -> Tuple[str, str]:
    """Conversations store their participants in sorted order."""
    return (user_a, user_b) if user_a <= user_b else (user_b, user_a)


class ConversationService:
    def __init__(self, repository: WorkspaceRepository, user_id: str):
        self.repository = repository
        self.user_id = user_id

    async def get_or_create(self, other_user_id: str, is_ai_chat: bool = False) -> str:
        """Return the id of the conversation with another user, creating it if needed."""
        user1_id, user2_id = ordered_pair(self.user_id, other_user_id)

        conversation_id = await self.repository.find_conversation(user1_id, user2_id, is_ai_chat)
        if conversation_id:
            return conversation_id

        conversation_id = await self.repository.create_conversation(user1_id, user2_id, is_ai_chat)
        logger.info(
            f"Created {'AI ' if is_ai_chat else ''}conversation {conversation_id} "
            f"between {user1_id} and {user2_id}"
        )
        return conversation_id

    async def start_ai_chat(self, owner_id: str) -> str:
        """Open an AI conversation with the bot persona of ``owner_id``."""
        bot_user_id = await self.repository.find_bot_user(owner_id)
        if not bot_user_id:
            bot_user_id = await self.repository.create_bot_user(owner_id)
            logger.info(f"Created bot user {bot_user_id} for {owner_id}")
        return await self.get_or_create(bot_user_id, is_ai_chat=True)

    async def list_conversations(self) -> List[DMConversation]:
        """The user's conversations, most recently active first."""
        rows = await self.repository.list_conversation_rows(self.user_id)
        conversations = []
        for row in rows:
            conversation = DataTransformer.to_conversation(row, self.user_id)
            if conversation:
                conversations.append(conversation)
        return conversations

    async def get_conversation(self, conversation_id: str) -> Optional[DMConversation]:
        row = await self.repository.get_conversation_row(conversation_id)
        return DataTransformer.to_conversation(row) if row else None
