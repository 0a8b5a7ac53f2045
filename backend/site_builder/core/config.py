from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Project root (parent of backend/) for .env loading when running from backend/
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """
    Application configuration loaded from environment variables.

    Provider credentials are not settings: they arrive with every request
    and are never read from the environment.
    """

    # Core app settings
    app_name: str = Field(default="ai_site_builder")
    environment: str = Field(default="development")  # development | staging | production
    debug: bool = Field(default=False)

    # HTTP server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000, ge=1, le=65535)
    api_prefix: str = Field(default="/api")
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    # Observability
    log_level: str = Field(default="INFO")

    # Provider selection
    provider_order: List[str] = Field(
        default_factory=lambda: ["openrouter", "openai", "deepseek", "gemini", "anthropic"],
        description="Preference order evaluated against the caller's API keys.",
    )
    disabled_providers: List[str] = Field(
        default_factory=list,
        description="Providers that fail fast with ProviderUnavailable when selected.",
    )
    openrouter_referer: str = Field(default="https://webcrafter.ai")
    openrouter_title: str = Field(default="AI Website Builder")

    # Generation defaults
    max_tokens: int = Field(default=8000, ge=1)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    top_p: float = Field(default=0.9, ge=0.0, le=1.0)
    request_timeout_seconds: int = Field(default=120)

    # Caller-level retry: zero or one extra attempt after a fixed backoff.
    chat_retries: int = Field(default=1, ge=0, le=1)
    retry_backoff_ms: int = Field(default=800, ge=0)

    # Prompt / display budgets
    file_char_budget: int = Field(default=3000, ge=1)
    history_limit: int = Field(default=50, ge=0)
    message_display_limit: int = Field(default=500, ge=1)

    model_config = SettingsConfigDict(
        env_prefix="SITE_BUILDER_",
        env_file=str(_ENV_FILE) if _ENV_FILE.exists() else ".env",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Return a cached settings instance for use as a dependency.
    """
    return Settings()
