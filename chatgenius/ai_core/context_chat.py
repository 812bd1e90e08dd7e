"""
Context Chat

Answers a question about the workspace using messages retrieved from the
vector index as context.
"""

import logging
from typing import List

from gen_ai_hub.proxy.langchain.openai import ChatOpenAI
from gen_ai_hub.proxy.core.proxy_clients import get_proxy_client
from langchain_core.messages import SystemMessage, HumanMessage

from chatgenius.ai_core.prompts.context_chat import (
    CONTEXT_CHAT_SYSTEM_PROMPT,
    format_context,
)
from chatgenius.config import get_settings

logger = logging.getLogger(__name__)
config = get_settings()


class ContextChatError(Exception):
    """
    Raised when answer generation fails.
    This is a system error (500) - the LLM call failed or returned nothing.
    """

    pass


class ContextChat:
    """Generates answers grounded in retrieved chat messages."""

    def __init__(self, llm=None):
        if llm is None:
            self.proxy_client = get_proxy_client("gen-ai-hub")
            llm = ChatOpenAI(
                proxy_model_name=config.openai_model,
                proxy_client=self.proxy_client,
                temperature=config.temperature,
                max_tokens=config.chat_max_tokens,
            )
        self.llm = llm

    async def answer(self, question: str, context_contents: List[str]) -> str:
        """
        Answer a question with the given message contents as context.

        Args:
            question: The user's question, sent as-is
            context_contents: Contents of the retrieved messages, best match first

        Returns:
            Answer text

        Raises:
            ContextChatError: If the LLM call fails or returns an empty answer
        """
        system_prompt = CONTEXT_CHAT_SYSTEM_PROMPT.format(
            context=format_context(context_contents)
        )
        messages = [
            SystemMessage(content=system_prompt),
            HumanMessage(content=question),
        ]

        try:
            response = await self.llm.ainvoke(messages)
        except Exception as e:
            logger.error(f"Context chat LLM call failed: {e}", exc_info=True)
            raise ContextChatError(f"Failed to generate answer: {e}") from e

        answer = (response.content or "").strip()
        if not answer:
            raise ContextChatError("LLM returned an empty answer")

        logger.info(f"Generated answer from {len(context_contents)} context messages")
        return answer
