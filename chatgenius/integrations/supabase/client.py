"""
Supabase Client

Creates the shared async clients and wraps query execution so that every
failure from the hosted database surfaces as ChatRepositoryError.
"""

import logging
from typing import Any, Dict, Optional

import httpx
from postgrest.exceptions import APIError
from supabase import AsyncClient, acreate_client

from chatgenius.config import get_settings
from chatgenius.models.chat import User
from chatgenius.integrations.supabase.transformers import DataTransformer

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"

_clients: Dict[str, AsyncClient] = {}


class ChatRepositoryError(Exception):
    """
    Raised when a call to the hosted database fails.
    Carries the Postgres/PostgREST error code when one is available.
    """

    def __init__(self, action: str, message: str, code: Optional[str] = None):
        super().__init__(f"{action} failed: {message}")
        self.action = action
        self.code = code


async def get_supabase_client(service_role: bool = False) -> AsyncClient:
    """
    Return a cached async Supabase client.

    Args:
        service_role: Use the service role key (server routes reading the
            whole table) instead of the anon key.
    """
    key_name = "service" if service_role else "anon"
    if key_name not in _clients:
        settings = get_settings()
        key = settings.supabase_service_role_key if service_role else settings.supabase_anon_key
        if not settings.supabase_url or not key:
            raise ValueError(
                f"SUPABASE_URL and the {key_name} key must be configured"
            )
        _clients[key_name] = await acreate_client(settings.supabase_url, key)
        logger.info(f"Supabase {key_name} client initialized")
    return _clients[key_name]


async def execute(query: Any, action: str) -> Any:
    """Await a PostgREST query builder, normalizing errors."""
    try:
        return await query.execute()
    except APIError as e:
        logger.error(f"Supabase error during {action}: {e.message} (code={e.code})")
        raise ChatRepositoryError(action, e.message or str(e), code=e.code) from e
    except httpx.HTTPError as e:
        logger.error(f"Network error during {action}: {e}")
        raise ChatRepositoryError(action, str(e)) from e


async def get_user_from_token(client: AsyncClient, access_token: str) -> Optional[User]:
    """Resolve the session user of a bearer token, or None if it is invalid."""
    try:
        response = await client.auth.get_user(access_token)
    except Exception as e:
        logger.warning(f"Token verification failed: {e}")
        return None

    if not response or not response.user:
        return None

    auth_user = response.user
    metadata = auth_user.user_metadata or {}
    return DataTransformer.to_user(
        {
            "id": auth_user.id,
            "username": metadata.get("username") or auth_user.email,
            "full_name": metadata.get("full_name"),
        }
    )
