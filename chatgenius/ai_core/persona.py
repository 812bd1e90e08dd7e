"""
AI Persona

Generates a reply in the style of a bot's owner. The owner's recent messages
are the only style examples; there is no fine-tuning.
"""

import logging
from typing import List

from gen_ai_hub.proxy.langchain.openai import ChatOpenAI
from gen_ai_hub.proxy.core.proxy_clients import get_proxy_client
from langchain_core.messages import SystemMessage, HumanMessage

from chatgenius.ai_core.prompts.persona import create_persona_prompt
from chatgenius.config import get_settings

logger = logging.getLogger(__name__)
config = get_settings()


class PersonaReplyError(Exception):
    """
    Raised when the persona reply cannot be generated.
    This is a system error (500).
    """

    pass


class PersonaResponder:
    def __init__(self, llm=None):
        if llm is None:
            self.proxy_client = get_proxy_client("gen-ai-hub")
            llm = ChatOpenAI(
                proxy_model_name=config.persona_model,
                proxy_client=self.proxy_client,
                temperature=config.temperature,
                max_tokens=config.persona_max_tokens,
            )
        self.llm = llm

    async def reply(self, owner_messages: List[str], user_message: str) -> str:
        """
        Reply to ``user_message`` the way the owner would.

        Args:
            owner_messages: The owner's recent message contents, newest first
            user_message: The message to answer

        Returns:
            Reply text
        """
        messages = [
            SystemMessage(content=create_persona_prompt(owner_messages)),
            HumanMessage(content=user_message),
        ]

        try:
            response = await self.llm.ainvoke(messages)
        except Exception as e:
            logger.error(f"Persona LLM call failed: {e}", exc_info=True)
            raise PersonaReplyError(f"Failed to generate AI response: {e}") from e

        reply = (response.content or "").strip()
        if not reply:
            raise PersonaReplyError("No response generated")
        return reply
