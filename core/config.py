"""
Application configuration using pydantic-settings.
Loads from environment variables and .env file.
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # General
    ruleweave_env: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Rule storage
    storage_backend: Literal["file", "memory", "none"] = "file"
    storage_dir: Path = Path("./data")
    storage_key: str = "ruleweave_rules"

    # LLM (Groq)
    groq_api_key: Optional[str] = None
    llm_model: str = "llama-3.3-70b-versatile"
    llm_realtime_model: str = "llama-3.1-8b-instant"
    llm_temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    llm_realtime_temperature: float = Field(default=0.2, ge=0.0, le=2.0)
    llm_validate_temperature: float = Field(default=0.2, ge=0.0, le=2.0)
    llm_max_tokens: int = Field(default=1000, ge=1, le=8192)
    llm_realtime_max_tokens: int = Field(default=300, ge=1, le=8192)
    realtime_min_chars: int = Field(default=10, ge=0)
    suggestion_limit: int = Field(default=5, ge=1, le=20)

    # API Metadata
    api_version: str = "1.0.0"
    api_title: str = "RuleWeave API"
    cors_allow_origins: list[str] = ["*"]

    @property
    def storage_path(self) -> Path:
        return self.storage_dir / f"{self.storage_key}.json"


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()


def configure_logging(settings: Optional[Settings] = None) -> None:
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
