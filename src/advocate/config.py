"""Configuration management for Advocate."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MODEL = "gemini:gemini-2.0-flash"


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="ADVOCATE_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Credentials, checked in this order
    google_api_key: str | None = Field(default=None, validation_alias="GOOGLE_API_KEY")
    gemini_api_key: str | None = Field(default=None, validation_alias="GEMINI_API_KEY")
    api_key: str | None = Field(default=None, description="Fallback API key for the model provider")

    # Model configuration
    model: str = Field(default=DEFAULT_MODEL, description="provider:model passed to the LLM client")
    api_base: str | None = Field(default=None, description="Optional API base URL")
    max_tokens: int = Field(default=1024, description="Maximum tokens for responses")
    model_timeout_seconds: float | None = Field(default=30, description="Timeout for one model call")

    # Session configuration
    home: Path = Field(default=Path.home() / ".advocate", description="Directory for persisted preferences")
    language: str = Field(default="en", description="Default response language")
    share_url: bool = Field(default=False, description="Prefix queries with the current page URL")
    page_url: str | None = Field(default=None, description="Page URL shared when share_url is on")
    speak_responses: bool = Field(default=True, description="Speak AI messages aloud")

    log_level: str = Field(default="INFO", description="Log level")

    @property
    def resolved_api_key(self) -> str | None:
        for candidate in (self.google_api_key, self.gemini_api_key, self.api_key):
            if candidate and candidate.strip():
                return candidate.strip()
        return None

    def resolve_home(self) -> Path:
        return self.home.expanduser().resolve()


def load_settings(**overrides: Any) -> Settings:
    """Build settings from the environment and ``.env``, applying non-None overrides."""
    values = {key: value for key, value in overrides.items() if value is not None}
    return Settings(**values)
