"""
Search Service

Keeps the vector index in step with the messages table and answers
semantic queries against it:
1. Full re-embed of every message
2. Incremental batches tracked in message_embedding_status
3. Single-message embedding from the database insert webhook
4. Nearest-neighbor search and context-grounded answers
"""

import logging
from typing import Any, Dict, List, Optional

from chatgenius.ai_core.context_chat import ContextChat
from chatgenius.ai_core.embeddings import EmbeddingError, MessageEmbedder
from chatgenius.config import get_settings
from chatgenius.integrations.supabase.client import ChatRepositoryError
from chatgenius.integrations.supabase.messages import MessageRepository
from chatgenius.integrations.vectorstore.client import (
    VectorMatch,
    VectorRecord,
    VectorStoreClient,
    VectorStoreError,
)
from chatgenius.models.api_responses import (
    ChatWithContextResponse,
    ContextSnippet,
    EmbedResponse,
    SearchResult,
    SyncEmbeddingsResponse,
    WebhookAck,
)

logger = logging.getLogger(__name__)

STATUS_COMPLETED = "completed"
STATUS_ERROR = "error"


def message_to_record(row: Dict[str, Any], vector: List[float]) -> VectorRecord:
    """Vector record for a message row; metadata carries what search returns."""
    return VectorRecord(
        id=row["id"],
        values=vector,
        metadata={
            "content": row.get("content"),
            "user_id": row.get("user_id"),
            "created_at": row.get("created_at"),
        },
    )


def match_to_result(match: VectorMatch) -> SearchResult:
    metadata = match.metadata
    return SearchResult(
        score=match.score,
        content=metadata.get("content"),
        created_at=metadata.get("created_at"),
        user_id=metadata.get("user_id"),
        message_id=match.id,
    )


class SearchService:
    """Semantic search over chat messages."""

    def __init__(
        self,
        repository: MessageRepository,
        embedder: Optional[MessageEmbedder] = None,
        vector_store: Optional[VectorStoreClient] = None,
        context_chat: Optional[ContextChat] = None,
    ):
        self.repository = repository
        self.embedder = embedder or MessageEmbedder()
        self.vector_store = vector_store or VectorStoreClient()
        self._context_chat = context_chat

    @property
    def context_chat(self) -> ContextChat:
        """Lazy initialization; only answering needs the chat model."""
        if self._context_chat is None:
            self._context_chat = ContextChat()
        return self._context_chat

    async def embed_all(self) -> EmbedResponse:
        """Embed every message and upsert the vectors by message id."""
        rows = [r for r in await self.repository.fetch_all() if r.get("content")]
        if not rows:
            return EmbedResponse(message="No messages found.", upserted=0)

        logger.info(f"Embedding {len(rows)} messages")
        vectors = await self.embedder.embed_texts([r["content"] for r in rows])
        records = [message_to_record(row, vector) for row, vector in zip(rows, vectors)]
        upserted = await self.vector_store.upsert(records)

        return EmbedResponse(
            message="Embeddings upserted successfully!", upserted=upserted
        )

    async def sync_embeddings(self, batch_size: Optional[int] = None) -> SyncEmbeddingsResponse:
        """
        Embed one batch of messages that have no embedding status yet.

        Each message is recorded as completed or error, so a failing message
        is not retried by later batches.

        Returns:
            SyncEmbeddingsResponse; continuation_token is the last message id
            when the batch was full
        """
        batch_size = batch_size or get_settings().sync_batch_size
        rows = await self.repository.fetch_unembedded(batch_size)
        if not rows:
            return SyncEmbeddingsResponse(processed=0, message="No messages to process")

        logger.info(f"Processing {len(rows)} messages")
        processed = 0
        errors = 0

        for row in rows:
            status, error_message = STATUS_COMPLETED, None
            try:
                vector = await self.embedder.embed_query(row.get("content") or "")
                await self.vector_store.upsert([message_to_record(row, vector)])
            except (EmbeddingError, VectorStoreError) as e:
                logger.error(f"Error processing message {row['id']}: {e}")
                status, error_message = STATUS_ERROR, str(e)

            try:
                await self.repository.record_embedding_status(
                    row["id"], status, error_message=error_message
                )
            except ChatRepositoryError as e:
                logger.error(f"Failed to record embedding status for {row['id']}: {e}")
                errors += 1
                continue

            if status == STATUS_COMPLETED:
                processed += 1
            else:
                errors += 1

        return SyncEmbeddingsResponse(
            processed=processed,
            errors=errors,
            continuation_token=rows[-1]["id"] if len(rows) == batch_size else None,
        )

    async def sync_single(self, payload: Dict[str, Any]) -> WebhookAck:
        """Embed the record of a database INSERT webhook; other events are ignored."""
        if payload.get("type") != "INSERT":
            return WebhookAck(message="Ignored non-INSERT event")

        record = payload.get("record") or {}
        if not record.get("id") or not record.get("content"):
            return WebhookAck(message="Ignored record without content")

        vector = await self.embedder.embed_query(record["content"])
        await self.vector_store.upsert([message_to_record(record, vector)])
        await self.repository.record_embedding_status(record["id"], STATUS_COMPLETED)

        logger.info(f"Embedded message {record['id']} from webhook")
        return WebhookAck(message="Embedding synced", details={"message_id": record["id"]})

    async def search_messages(self, query: str, top_k: Optional[int] = None) -> List[SearchResult]:
        top_k = top_k or get_settings().search_top_k
        vector = await self.embedder.embed_query(query)
        matches = await self.vector_store.query(vector, top_k=top_k)
        return [match_to_result(m) for m in matches]

    async def chat_with_context(self, query: str) -> ChatWithContextResponse:
        """Answer a question using the closest messages as context."""
        results = await self.search_messages(query, get_settings().search_top_k)
        answer = await self.context_chat.answer(query, [r.content for r in results])
        return ChatWithContextResponse(
            answer=answer,
            context=[ContextSnippet(content=r.content, score=r.score) for r in results],
        )
