"""
Application Configuration

Uses pydantic-settings for environment variable loading with validation.
Only entry points (the CLI) read settings; services take their options as
explicit arguments.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Environment variables can be set directly or via .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="FORMLAYOUT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Environment
    # ==========================================================================
    environment: Literal["development", "testing", "production"] = Field(
        default="development",
        description="Runtime environment"
    )

    debug: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Root log level used by entry points"
    )

    # ==========================================================================
    # Layouts
    # ==========================================================================
    layouts_path: str = Field(
        default="App/ui",
        description="Directory holding layout-sets.json and one folder per layout-set"
    )

    concurrent_context_build: bool = Field(
        default=False,
        description="Build pages and sub-form data elements concurrently"
    )

    @computed_field
    @property
    def effective_log_level(self) -> str:
        """Debug mode always logs at DEBUG."""
        return "DEBUG" if self.debug else self.log_level


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
