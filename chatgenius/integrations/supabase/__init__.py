# Supabase integration module
from chatgenius.integrations.supabase.client import (
    ChatRepositoryError,
    get_supabase_client,
    get_user_from_token,
)
from chatgenius.integrations.supabase.messages import MessageRepository, MessagePage
from chatgenius.integrations.supabase.workspace import WorkspaceRepository
from chatgenius.integrations.supabase.realtime import SupabaseRealtimeFeed
from chatgenius.integrations.supabase.transformers import DataTransformer

__all__ = [
    "ChatRepositoryError",
    "get_supabase_client",
    "get_user_from_token",
    "MessageRepository",
    "MessagePage",
    "WorkspaceRepository",
    "SupabaseRealtimeFeed",
    "DataTransformer",
]
