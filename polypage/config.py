"""
Application configuration.

Loads settings from environment variables with sensible defaults.
Which documents go to which databases lives in the pipeline YAML
(see config_loader); this module only holds credentials and knobs.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # ==========================================================================
    # Environment
    # ==========================================================================

    environment: str = "development"
    log_level: str = "INFO"

    # ==========================================================================
    # API Server
    # ==========================================================================

    api_host: str = "0.0.0.0"
    api_port: int = 1000

    # ==========================================================================
    # Notion (content store)
    # ==========================================================================

    notion_api_key: str = ""
    notion_version: str = "2022-06-28"
    notion_base_url: str = "https://api.notion.com/v1"

    # ==========================================================================
    # Supabase (image bucket + translation records)
    # ==========================================================================

    supabase_url: str = ""
    supabase_key: str = ""
    supabase_bucket: str = "ppt"
    supabase_records_table: str = "translations"

    # ==========================================================================
    # AI / LLM (translation backend)
    # ==========================================================================

    # Primary: Gemini (accepts either GOOGLE_API_KEY or GEMINI_API_KEY)
    google_api_key: str = ""
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash"

    openai_api_key: str = ""
    openai_model: str = "gpt-4-turbo"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-3-opus-20240229"

    llm_provider: str = "gemini"

    # ==========================================================================
    # Pipeline
    # ==========================================================================

    pipeline_config_path: str = "config/pipeline.yaml"
    data_dir: str = "./data"
    scratch_dir: str = "./data/scratch"
    image_fetch_attempts: int = 3
    image_retry_delay_seconds: float = 2.0
    http_timeout_seconds: float = 60.0
    page_size: int = 100

    # ==========================================================================
    # Helpers
    # ==========================================================================

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def use_notion(self) -> bool:
        """Whether the real content store is configured."""
        return bool(self.notion_api_key)

    @property
    def use_supabase(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(level: str | None = None) -> None:
    """Install a single stream handler on the root logger."""
    level = (level or get_settings().log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
