"""
API Response Models

Pydantic models for consistent API response structures.
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Any


class EmbedResponse(BaseModel):
    """Response of the full re-embedding endpoint."""

    message: str = Field(..., description="Human readable outcome")
    upserted: int = Field(0, description="Number of vectors upserted")


class SyncEmbeddingsResponse(BaseModel):
    """Response of the incremental embedding sync endpoint."""

    success: bool = Field(True, description="Whether the batch ran")
    processed: int = Field(0, description="Messages embedded successfully")
    errors: int = Field(0, description="Messages that failed to embed")
    message: Optional[str] = Field(None, description="Informational message")
    continuation_token: Optional[str] = Field(
        None, description="Last processed message id when more may remain"
    )


class SearchResult(BaseModel):
    """Single semantic search hit."""

    score: float = Field(..., description="Similarity score (higher is closer)")
    content: Optional[str] = Field(None, description="Message content")
    created_at: Optional[str] = Field(None, description="Message creation time")
    user_id: Optional[str] = Field(None, description="Author of the message")
    message_id: Optional[str] = Field(None, description="Message id")


class SearchResponse(BaseModel):
    results: List[SearchResult] = Field(default_factory=list)


class ContextSnippet(BaseModel):
    """Retrieved message used as context for an answer."""

    content: Optional[str] = None
    score: float


class ChatWithContextResponse(BaseModel):
    answer: Optional[str] = Field(None, description="Generated answer")
    context: List[ContextSnippet] = Field(
        default_factory=list, description="Messages used as context"
    )


class PersonaReplyResponse(BaseModel):
    success: bool = True
    message_id: Optional[str] = Field(None, description="Id of the bot's reply")


class WebhookAck(BaseModel):
    message: str
    details: Optional[Any] = None
