"""
Prompts for AI persona replies.

A persona bot answers in the style of its owner, learned from the owner's
recent messages.
"""

from typing import Iterable, Optional


PERSONA_SYSTEM_PROMPT = """You are an AI trained to respond like a specific user. Here are their recent messages to learn from:

{training_data}

Respond to messages in a similar style and tone. Keep responses concise and natural. If you're not sure how to respond, use a casual, friendly tone."""


def create_persona_prompt(owner_messages: Iterable[Optional[str]]) -> str:
    """
    Build the persona system prompt.

    Args:
        owner_messages: Contents of the owner's recent messages, newest first

    Returns:
        Formatted system prompt
    """
    training_data = "\n".join(m for m in owner_messages if m)
    return PERSONA_SYSTEM_PROMPT.format(training_data=training_data)
