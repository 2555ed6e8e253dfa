"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Vault settings loaded from environment variables."""

    supabase_url: str
    supabase_key: str
    storage_endpoint: str
    storage_project_id: str
    storage_bucket_id: str
    documents_table: str = "documents"
    login_retry_delay_seconds: float = 1.5
    token_store_path: str | None = None
    purge_detached_images: bool = False
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
