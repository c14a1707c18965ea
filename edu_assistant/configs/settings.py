"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.
Provides dependency injection factory for FastAPI.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from pydantic import Field, model_validator

from edu_assistant.configs.auth import DEFAULT_JWT_SECRET, AuthSettings
from edu_assistant.configs.base import BaseSettings
from edu_assistant.configs.database import DatabaseSettings
from edu_assistant.configs.llm import LLMSettings
from edu_assistant.configs.rate_limit import RateLimitSettings
from edu_assistant.configs.retrieval import RetrievalSettings

LOCAL_ENVIRONMENTS = ("development", "test")


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    cors_allow_origins: list[str] = Field(default=["*"])

    # Aggregated settings
    database: DatabaseSettings = DatabaseSettings()
    auth: AuthSettings = AuthSettings()
    rate_limit: RateLimitSettings = RateLimitSettings()
    retrieval: RetrievalSettings = RetrievalSettings()
    llm: LLMSettings = LLMSettings()

    @model_validator(mode="after")
    def require_jwt_secret_outside_development(self) -> "Settings":
        """Refuse to start with the well-known signing secret outside local development."""
        if self.environment.lower() not in LOCAL_ENVIRONMENTS and self.auth.jwt_secret == DEFAULT_JWT_SECRET:
            raise ValueError(
                f"AUTH_JWT_SECRET must be set when ENVIRONMENT={self.environment}"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns Settings instance, cached for dependency injection.
    Environment variables loaded once at startup.

    Returns:
        Settings: Application settings instance

    Usage:
        from edu_assistant.configs import get_settings
        settings = get_settings()
    """
    return Settings()
