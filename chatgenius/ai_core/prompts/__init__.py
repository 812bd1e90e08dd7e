"""Prompts package."""

from chatgenius.ai_core.prompts.context_chat import (
    CONTEXT_CHAT_SYSTEM_PROMPT,
    format_context,
)
from chatgenius.ai_core.prompts.persona import PERSONA_SYSTEM_PROMPT, create_persona_prompt

__all__ = [
    "CONTEXT_CHAT_SYSTEM_PROMPT",
    "format_context",
    "PERSONA_SYSTEM_PROMPT",
    "create_persona_prompt",
]
