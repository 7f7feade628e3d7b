"""
Application configuration using Pydantic Settings.
Loads environment variables from .env file.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "SentimentScope API"
    debug: bool = False
    api_version: str = "v1"

    # Google Gemini (primary provider)
    gemini_api_key: str | None = None
    gemini_model: str = "gemini-2.0-flash"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta/models"

    # Hugging Face Inference API
    huggingface_api_key: str | None = None
    huggingface_base_url: str = "https://api-inference.huggingface.co/models"
    huggingface_relay_url: str | None = None  # Same-origin relay, optional
    huggingface_model_loading_wait: float = 2.0
    huggingface_model_loading_retries: int = 2

    # OpenAI
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o-mini"
    openai_base_url: str = "https://api.openai.com/v1"

    # Analysis settings
    default_provider: Literal["gemini", "huggingface", "openai"] = "gemini"
    sentiment_batch_delay: float = 0.5  # Seconds between batch requests
    ensemble_confidence_boost: float = 1.1
    http_timeout_seconds: float = 30.0

    # Persistence
    storage_backend: Literal["file", "memory", "supabase"] = "file"
    store_path: str = "sentimentscope_store.json"
    supabase_url: str | None = None
    supabase_key: str | None = None
    supabase_table: str = "app_state"

    # Store limits
    store_max_entries: int = 100
    store_max_live_feed: int = 10
    recent_history_max_items: int = 10

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
