"""
Vector Store Client

Message embeddings in a Chroma server collection named after the index.
Chroma's client is synchronous; calls run in a worker thread so the event
loop stays free.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import chromadb

from chatgenius.config import get_settings

logger = logging.getLogger(__name__)


class VectorStoreError(Exception):
    """Raised when the vector database rejects or fails a request."""

    pass


@dataclass
class VectorRecord:
    id: str
    values: List[float]
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class VectorMatch:
    id: str
    score: float  # cosine similarity, 1.0 is identical
    metadata: Dict[str, Any] = field(default_factory=dict)


class VectorStoreClient:
    """Upsert and nearest-neighbor query over one named index."""

    def __init__(self, index_name: Optional[str] = None, client: Any = None):
        settings = get_settings()
        self.index_name = index_name or settings.vector_index_name
        self.client = client or chromadb.HttpClient(
            host=settings.vector_db_host, port=settings.vector_db_port
        )
        self._collection = None

    @property
    def collection(self):
        """Lazy get-or-create of the index collection (cosine space)."""
        if self._collection is None:
            self._collection = self.client.get_or_create_collection(
                name=self.index_name, metadata={"hnsw:space": "cosine"}
            )
        return self._collection

    async def upsert(self, records: List[VectorRecord]) -> int:
        """
        Insert or replace vectors by id.

        Returns:
            Number of records written
        """
        if not records:
            return 0

        def _upsert():
            self.collection.upsert(
                ids=[r.id for r in records],
                embeddings=[r.values for r in records],
                metadatas=[_clean_metadata(r.metadata) for r in records],
            )

        try:
            await asyncio.to_thread(_upsert)
        except Exception as e:
            logger.error(f"Vector upsert into {self.index_name} failed: {e}")
            raise VectorStoreError(f"upsert failed: {e}") from e

        logger.info(f"Upserted {len(records)} vectors into {self.index_name}")
        return len(records)

    async def query(self, vector: List[float], top_k: int = 5) -> List[VectorMatch]:
        """Return the ``top_k`` nearest vectors with their metadata."""

        def _query():
            return self.collection.query(
                query_embeddings=[vector],
                n_results=top_k,
                include=["metadatas", "distances"],
            )

        try:
            results = await asyncio.to_thread(_query)
        except Exception as e:
            logger.error(f"Vector query on {self.index_name} failed: {e}")
            raise VectorStoreError(f"query failed: {e}") from e

        ids = (results.get("ids") or [[]])[0]
        metadatas = (results.get("metadatas") or [[]])[0] or []
        distances = (results.get("distances") or [[]])[0] or []

        matches = []
        for i, match_id in enumerate(ids):
            matches.append(
                VectorMatch(
                    id=match_id,
                    score=1 - distances[i] if i < len(distances) else 0.0,
                    metadata=(metadatas[i] if i < len(metadatas) else None) or {},
                )
            )
        return matches


def _clean_metadata(metadata: Dict[str, Any]) -> Dict[str, Any]:
    """Chroma metadata values must be scalars and not None."""
    return {
        key: value
        for key, value in metadata.items()
        if isinstance(value, (str, int, float, bool))
    }
