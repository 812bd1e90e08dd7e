from pydantic_settings import BaseSettings
from pydantic import ConfigDict
from functools import lru_cache
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App
    app_name: str = "ChatGenius"
    debug: bool = False

    # Supabase
    supabase_url: str = ""
    supabase_anon_key: str = ""
    supabase_service_role_key: str = ""

    # Vector database (Chroma server)
    vector_db_host: str = "localhost"
    vector_db_port: int = 8000
    vector_index_name: str = "messages-from-db"

    # LLM models (via gen_ai_hub proxy, no API key needed)
    openai_model: str = "gpt-4o"
    persona_model: str = "gpt-4o-mini"
    embedding_model: str = "text-embedding-3-large"
    temperature: float = 0.7
    chat_max_tokens: int = 500
    persona_max_tokens: int = 150

    # Messages
    messages_per_page: int = 25
    scroll_threshold: int = 100
    max_message_length: int = 4000  # Unicode code points
    max_file_size_bytes: int = 50 * 1024 * 1024
    allowed_content_types: List[str] = [
        "image/",
        "text/",
        "application/pdf",
        "application/zip",
        "application/json",
    ]

    # Presence
    presence_heartbeat_seconds: int = 30

    # AI features
    persona_history_limit: int = 100
    search_top_k: int = 5
    sync_batch_size: int = 3

    model_config = ConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
