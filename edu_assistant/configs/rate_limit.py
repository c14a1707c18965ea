"""
Rate limit configuration settings.

Dependencies: pydantic, pydantic_settings
System role: Per-identity admission control configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from edu_assistant.configs.base import BaseSettings


class RateLimitSettings(BaseSettings):
    """Fixed-window rate limit configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="RATE_LIMIT_",
        case_sensitive=False,
        extra="ignore",
    )

    max_requests: int = Field(default=20, ge=1, description="Requests admitted per window")
    window_seconds: float = Field(default=60.0, gt=0, description="Window length in seconds")
    count_rejected: bool = Field(
        default=True,
        description="Whether rejected attempts still count toward the window",
    )
    max_tracked_keys: int = Field(
        default=10_000,
        ge=1,
        description="Bucket count above which expired buckets are pruned",
    )
