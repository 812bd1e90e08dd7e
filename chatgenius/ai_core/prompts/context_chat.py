"""
Prompts for answering questions about chat history.

The retrieved messages are injected into the system prompt; the user's
question is sent unchanged as the human message.
"""

from typing import Iterable, Optional


CONTEXT_CHAT_SYSTEM_PROMPT = """You are a helpful assistant answering questions about chat messages.
Below is some context from previous messages that may be relevant to the question.
Use this context to inform your answer, but don't mention that you're using any context
unless specifically asked. Respond in a natural, conversational way.

Context:
{context}"""


def format_context(contents: Iterable[Optional[str]]) -> str:
    """Join retrieved message contents, skipping empty ones."""
    return "\n\n".join(content for content in contents if content)
