"""Configuration for finpro.

Tunables come from environment variables (and an optional .env file) through
pydantic-settings. The database location is resolved separately by the
database factories and the CLI ``--db-path`` option.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class GeminiSettings(BaseSettings):
    """Gemini LLM configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_key: Optional[str] = Field(
        default=None,
        description="Gemini API key (a key stored in the user settings wins)",
    )
    model_name: str = Field(
        default="gemini-1.5-flash",
        description="Gemini model to use",
    )
    temperature: float = Field(default=0.4, ge=0.0, le=1.0)
    max_output_tokens: int = Field(default=1024, ge=100, le=8192)
    max_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts per request before giving up",
    )


class FinanceSettings(BaseSettings):
    """Ledger tunables."""

    model_config = SettingsConfigDict(
        env_prefix="FINPRO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    debug: bool = Field(default=False, description="Enable debug logging")
    alert_window_days: int = Field(
        default=7,
        ge=0,
        description="Days ahead that count as upcoming on the dashboard",
    )
    upcoming_window_days: int = Field(
        default=3,
        ge=0,
        description="Days ahead that count as upcoming for generic queries",
    )
    recent_transactions_for_insights: int = Field(
        default=30,
        ge=1,
        description="How many recent transactions are sent to the AI advisor",
    )

    @property
    def gemini(self) -> GeminiSettings:
        return GeminiSettings()


@lru_cache()
def get_settings() -> FinanceSettings:
    """Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return FinanceSettings()
