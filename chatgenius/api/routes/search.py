"""
Search and Embedding API Routes

1. POST /api/embed - Re-embed every message
2. POST /api/sync-embeddings - Embed the next batch of unprocessed messages
3. POST /api/sync-message-embedding - Database webhook for new messages
4. POST /api/search-messages - Semantic message search
5. POST /api/chat-with-context - Answer a question from retrieved messages
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from chatgenius.api.deps import get_search_service
from chatgenius.models.api_responses import (
    ChatWithContextResponse,
    EmbedResponse,
    SearchResponse,
    SyncEmbeddingsResponse,
    WebhookAck,
)
from chatgenius.services.search_service import SearchService

logger = logging.getLogger(__name__)
router = APIRouter()


class SearchRequest(BaseModel):
    query: str = Field(..., description="Natural language search query")
    top_k: int = Field(5, ge=1, le=50, description="Number of results")


class ChatWithContextRequest(BaseModel):
    query: str = Field(..., description="Question about the chat history")


class WebhookPayload(BaseModel):
    """Supabase database webhook body."""

    type: str
    table: Optional[str] = None
    record: Optional[Dict[str, Any]] = None


@router.post("/embed", response_model=EmbedResponse)
async def embed_messages(service: SearchService = Depends(get_search_service)):
    try:
        return await service.embed_all()
    except Exception as e:
        logger.error(f"Error in embed endpoint: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/sync-embeddings", response_model=SyncEmbeddingsResponse)
async def sync_embeddings(
    batch_size: int = Query(3, ge=1, le=100, description="Messages per batch"),
    service: SearchService = Depends(get_search_service),
):
    """
    Embed up to ``batch_size`` messages that have no embedding status yet.

    Call repeatedly while a continuation_token is returned.
    """
    try:
        return await service.sync_embeddings(batch_size)
    except Exception as e:
        logger.error(f"Error in sync embeddings endpoint: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/sync-message-embedding", response_model=WebhookAck)
async def sync_message_embedding(
    payload: WebhookPayload, service: SearchService = Depends(get_search_service)
):
    try:
        return await service.sync_single(payload.model_dump())
    except Exception as e:
        logger.error(f"Error syncing message embedding: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/search-messages", response_model=SearchResponse)
async def search_messages(
    request: SearchRequest, service: SearchService = Depends(get_search_service)
):
    if not request.query.strip():
        raise HTTPException(status_code=400, detail="Missing or invalid query")

    try:
        results = await service.search_messages(request.query, request.top_k)
    except Exception as e:
        logger.error(f"Error searching messages: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to search messages")

    return SearchResponse(results=results)


@router.post("/chat-with-context", response_model=ChatWithContextResponse)
async def chat_with_context(
    request: ChatWithContextRequest, service: SearchService = Depends(get_search_service)
):
    if not request.query.strip():
        raise HTTPException(status_code=400, detail="Missing or invalid query")

    try:
        return await service.chat_with_context(request.query)
    except Exception as e:
        logger.error(f"Error in chat with context: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to process chat request")
