"""
Message Embeddings

Embeds message contents and search queries with the configured embedding
model through the gen_ai_hub proxy.
"""

import logging
from typing import List

from gen_ai_hub.proxy.langchain.openai import OpenAIEmbeddings
from gen_ai_hub.proxy.core.proxy_clients import get_proxy_client

from chatgenius.config import get_settings

logger = logging.getLogger(__name__)
config = get_settings()


class EmbeddingError(Exception):
    """
    Raised when the embedding model call fails.
    This is a system error (500).
    """

    pass


class MessageEmbedder:
    """Turns texts into vectors for the message index."""

    def __init__(self, embeddings=None):
        if embeddings is None:
            self.proxy_client = get_proxy_client("gen-ai-hub")
            embeddings = OpenAIEmbeddings(
                proxy_model_name=config.embedding_model,
                proxy_client=self.proxy_client,
            )
        self.embeddings = embeddings
        self.model = config.embedding_model

    async def embed_texts(self, texts: List[str]) -> List[List[float]]:
        """Embed a batch of message contents, one vector per text."""
        if not texts:
            return []
        try:
            return await self.embeddings.aembed_documents(texts)
        except Exception as e:
            logger.error(f"Embedding {len(texts)} texts with {self.model} failed: {e}", exc_info=True)
            raise EmbeddingError(f"Failed to embed texts: {e}") from e

    async def embed_query(self, text: str) -> List[float]:
        try:
            return await self.embeddings.aembed_query(text)
        except Exception as e:
            logger.error(f"Embedding query with {self.model} failed: {e}", exc_info=True)
            raise EmbeddingError(f"Failed to embed query: {e}") from e
