"""
Authentication configuration settings.

Bearer tokens are JWTs issued by the identity backend; the service only
verifies them with the shared signing secret.

Dependencies: pydantic, pydantic_settings
System role: Identity gate configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from edu_assistant.configs.base import BaseSettings

DEFAULT_JWT_SECRET = "change-me-in-production"


class AuthSettings(BaseSettings):
    """JWT verification configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="AUTH_",
        case_sensitive=False,
        extra="ignore",
    )

    jwt_secret: str = Field(
        default=DEFAULT_JWT_SECRET,
        description="Shared secret used to verify bearer tokens",
    )
    jwt_algorithm: str = Field(default="HS256", description="JWT signing algorithm")
    jwt_audience: str | None = Field(
        default="authenticated",
        description="Expected 'aud' claim; None disables the audience check",
    )
