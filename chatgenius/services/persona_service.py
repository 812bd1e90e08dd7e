"""
Persona Reply Service

Answers a message in an AI chat as the bot persona of the other participant's
owner, then posts the reply into the conversation as the bot user.
"""

import logging
from typing import Optional

from chatgenius.ai_core.persona import PersonaResponder
from chatgenius.config import get_settings
from chatgenius.integrations.supabase.messages import MessageRepository
from chatgenius.integrations.supabase.workspace import WorkspaceRepository

logger = logging.getLogger(__name__)


class ConversationNotFoundError(Exception):
    """Raised when the conversation does not exist or is not an AI chat (404)."""

    pass


class BotNotFoundError(Exception):
    """Raised when the AI chat has no bot participant (404)."""

    pass


class PersonaReplyService:
    def __init__(
        self,
        messages: MessageRepository,
        workspace: WorkspaceRepository,
        responder: Optional[PersonaResponder] = None,
    ):
        self.messages = messages
        self.workspace = workspace
        self._responder = responder

    @property
    def responder(self) -> PersonaResponder:
        if self._responder is None:
            self._responder = PersonaResponder()
        return self._responder

    async def reply(
        self, conversation_id: str, user_message: str, user_id: Optional[str] = None
    ) -> Optional[str]:
        """
        Generate and post the bot's reply.

        When ``user_id`` is given it must be a participant of the conversation.

        Returns:
            Id of the inserted bot message

        Raises:
            ConversationNotFoundError: If the conversation is missing or not an AI chat
            BotNotFoundError: If neither participant is a bot
            PersonaReplyError: If the reply cannot be generated
        """
        row = await self.workspace.get_conversation_row(conversation_id)
        if not row or not row.get("is_ai_chat"):
            raise ConversationNotFoundError("Conversation not found or not an AI chat")
        if user_id and user_id not in (row.get("user1_id"), row.get("user2_id")):
            raise ConversationNotFoundError("Conversation not found or not an AI chat")

        bot = next(
            (
                user
                for user in (row.get("user1"), row.get("user2"))
                if isinstance(user, dict) and user.get("is_bot")
            ),
            None,
        )
        if not bot or not bot.get("bot_owner_id"):
            raise BotNotFoundError("Bot user not found")

        history = await self.messages.fetch_user_history(
            bot["bot_owner_id"], get_settings().persona_history_limit
        )
        owner_messages = [m.get("content") for m in history]
        logger.info(
            f"Generating persona reply for conversation {conversation_id} "
            f"from {len(owner_messages)} owner messages"
        )

        reply = await self.responder.reply(owner_messages, user_message)
        return await self.messages.insert_bot_message(conversation_id, bot["id"], reply)
