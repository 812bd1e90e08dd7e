"""
FastAPI dependencies: Supabase clients, repositories, services and the
bearer-token user.
"""

import logging
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, HTTPException
from supabase import AsyncClient

from chatgenius.ai_core.embeddings import MessageEmbedder
from chatgenius.integrations.supabase.client import get_supabase_client, get_user_from_token
from chatgenius.integrations.supabase.messages import MessageRepository
from chatgenius.integrations.supabase.workspace import WorkspaceRepository
from chatgenius.integrations.vectorstore.client import VectorStoreClient
from chatgenius.models.chat import User
from chatgenius.services.channel_service import ChannelService
from chatgenius.services.persona_service import PersonaReplyService
from chatgenius.services.search_service import SearchService

logger = logging.getLogger(__name__)


async def get_service_client() -> AsyncClient:
    return await get_supabase_client(service_role=True)


async def get_anon_client() -> AsyncClient:
    return await get_supabase_client()


async def get_message_repository(
    client: AsyncClient = Depends(get_service_client),
) -> MessageRepository:
    return MessageRepository(client)


async def get_workspace_repository(
    client: AsyncClient = Depends(get_service_client),
) -> WorkspaceRepository:
    return WorkspaceRepository(client)


# Model clients are created once per process


@lru_cache
def get_embedder() -> MessageEmbedder:
    return MessageEmbedder()


@lru_cache
def get_vector_store() -> VectorStoreClient:
    return VectorStoreClient()


async def get_search_service(
    repository: MessageRepository = Depends(get_message_repository),
) -> SearchService:
    return SearchService(repository, get_embedder(), get_vector_store())


async def get_channel_service(
    repository: WorkspaceRepository = Depends(get_workspace_repository),
) -> ChannelService:
    return ChannelService(repository)


async def get_persona_service(
    messages: MessageRepository = Depends(get_message_repository),
    workspace: WorkspaceRepository = Depends(get_workspace_repository),
) -> PersonaReplyService:
    return PersonaReplyService(messages, workspace)


async def get_current_user(
    authorization: Optional[str] = Header(None),
    client: AsyncClient = Depends(get_anon_client),
) -> User:
    """Resolve ``Authorization: Bearer <token>`` to the session user, else 401."""
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise HTTPException(status_code=401, detail="Unauthorized")

    user = await get_user_from_token(client, token)
    if user is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user
