"""
Application configuration using Pydantic Settings.

Environment-based infrastructure switching is controlled by the ENVIRONMENT variable.
"""

from functools import lru_cache
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ===========================================
    # Environment
    # ===========================================
    ENVIRONMENT: Literal["local", "gcp"] = "local"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # ===========================================
    # Database
    # ===========================================
    DATABASE_URL: str = "sqlite+aiosqlite:///./haven.db"

    # ===========================================
    # AI Responder
    # ===========================================
    LLM_PROVIDER: Literal["litellm"] = "litellm"

    # LiteLLM model identifier, e.g. "groq/llama3-8b-8192" or "openai/gpt-4o-mini"
    LITELLM_MODEL: str = "groq/llama3-8b-8192"

    # LiteLLM custom endpoint (optional, for proxy servers)
    LITELLM_API_BASE: str = ""

    # LiteLLM custom API key (optional, for custom endpoints)
    LITELLM_API_KEY: str = ""

    # Upper bound for a single responder call
    LLM_TIMEOUT_SECONDS: float = 30.0

    CHAT_MAX_TOKENS: int = 500
    CHAT_TEMPERATURE: float = 0.7
    TITLE_MAX_TOKENS: int = 20
    TITLE_TEMPERATURE: float = 0.5

    # Number of most recent messages sent to the responder
    CONTEXT_WINDOW_SIZE: int = 10

    # ===========================================
    # Analytics
    # ===========================================
    # IANA timezone used to bucket conversations into calendar days
    ANALYTICS_TIMEZONE: str = "UTC"
    DEFAULT_STATISTICS_PERIOD_DAYS: int = 30

    # ===========================================
    # Auth
    # ===========================================
    # mock: bearer token is taken as the user id (development only)
    # jwt: HMAC-signed JWT, "sub" claim is the user id
    AUTH_PROVIDER: Literal["mock", "jwt"] = "mock"
    JWT_SECRET: str = ""
    JWT_ISSUER: str = "haven"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 60 * 24 * 7

    # ===========================================
    # Server
    # ===========================================
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    ALLOWED_ORIGINS: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"]
    )

    @property
    def is_gcp(self) -> bool:
        """Check if running in GCP environment."""
        return self.ENVIRONMENT == "gcp"

    @property
    def is_local(self) -> bool:
        """Check if running in local environment."""
        return self.ENVIRONMENT == "local"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures settings are loaded only once.
    """
    return Settings()
