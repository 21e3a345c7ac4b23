"""
Configuration settings for iplusone.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Database
    # ========================================
    database_url: str = Field(
        default="sqlite:///iplusone.db",
        description="SQLAlchemy connection string",
    )
    database_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Seconds to wait on a locked SQLite database before failing",
    )
    database_echo: bool = Field(
        default=False,
        description="Echo SQL statements to the log",
    )

    # ========================================
    # Vocabulary
    # ========================================
    frequency_list_path: str | None = Field(
        default=None,
        description=(
            "Word frequency list, one word per line, most frequent first. "
            "None uses the small bundled starter list, which ranks most real words as unknown"
        ),
    )

    # ========================================
    # Morphological Analyzer
    # ========================================
    analyzer: Literal["jumanpp", "fugashi"] = Field(
        default="jumanpp",
        description="Tokenizer backend: external jumanpp process or in-process fugashi",
    )
    jumanpp_command: str = Field(
        default="jumanpp",
        description="Executable used by the jumanpp analyzer",
    )
    analyzer_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Seconds before an analyzer call is abandoned",
    )

    # ========================================
    # Scheduling
    # ========================================
    day_end_hour: int = Field(
        default=4,
        ge=0,
        le=23,
        description="Local hour at which the review day rolls over",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )

    def is_sqlite(self) -> bool:
        """Whether the configured store is SQLite."""
        return self.database_url.startswith("sqlite")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
