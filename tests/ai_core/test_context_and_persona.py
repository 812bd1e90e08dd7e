"""
Unit tests for answer generation and persona replies with a mocked LLM.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from langchain_core.messages import HumanMessage, SystemMessage

from chatgenius.ai_core.context_chat import ContextChat, ContextChatError
from chatgenius.ai_core.embeddings import EmbeddingError, MessageEmbedder
from chatgenius.ai_core.persona import PersonaReplyError, PersonaResponder
from chatgenius.ai_core.prompts import create_persona_prompt, format_context


def llm_returning(content):
    llm = MagicMock()
    llm.ainvoke = AsyncMock(return_value=MagicMock(content=content))
    return llm


def test_format_context_skips_empty_contents():
    assert format_context(["deploy at 5", None, "", "after standup"]) == "deploy at 5\n\nafter standup"


def test_context_chat_puts_context_in_system_prompt():
    llm = llm_returning("  The deploy is at 5.  ")

    answer = asyncio.run(ContextChat(llm=llm).answer("when is the deploy?", ["deploy at 5"]))

    assert answer == "The deploy is at 5."
    system, human = llm.ainvoke.await_args.args[0]
    assert isinstance(system, SystemMessage)
    assert "Context:\ndeploy at 5" in system.content
    assert isinstance(human, HumanMessage)
    assert human.content == "when is the deploy?"


def test_context_chat_empty_answer():
    with pytest.raises(ContextChatError):
        asyncio.run(ContextChat(llm=llm_returning("")).answer("q", []))


def test_context_chat_llm_failure():
    llm = MagicMock()
    llm.ainvoke = AsyncMock(side_effect=RuntimeError("quota exceeded"))
    with pytest.raises(ContextChatError):
        asyncio.run(ContextChat(llm=llm).answer("q", ["c"]))


def test_persona_prompt_contains_owner_messages():
    prompt = create_persona_prompt(["lgtm", None, "ship it"])
    assert "lgtm\nship it" in prompt
    assert "similar style and tone" in prompt


def test_persona_reply():
    llm = llm_returning("sounds good")

    reply = asyncio.run(PersonaResponder(llm=llm).reply(["lgtm"], "deploy?"))

    assert reply == "sounds good"
    system, human = llm.ainvoke.await_args.args[0]
    assert "lgtm" in system.content
    assert human.content == "deploy?"


def test_persona_without_response():
    with pytest.raises(PersonaReplyError, match="No response generated"):
        asyncio.run(PersonaResponder(llm=llm_returning("   ")).reply([], "hi"))


def test_embedder_wraps_backend_errors():
    embeddings = MagicMock()
    embeddings.aembed_query = AsyncMock(side_effect=RuntimeError("timeout"))
    embeddings.aembed_documents = AsyncMock(return_value=[[0.1], [0.2]])
    embedder = MessageEmbedder(embeddings=embeddings)

    assert asyncio.run(embedder.embed_texts(["a", "b"])) == [[0.1], [0.2]]
    assert asyncio.run(embedder.embed_texts([])) == []
    with pytest.raises(EmbeddingError):
        asyncio.run(embedder.embed_query("a"))
