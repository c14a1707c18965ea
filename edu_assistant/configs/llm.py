"""
Generation backend configuration settings.

Defaults used when no class prompt settings row matches the student's class
and the activity type.

Dependencies: pydantic, pydantic_settings
System role: Chat generation configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from edu_assistant.configs.base import BaseSettings

DEFAULT_PROMPT_TEMPLATE = (
    "You are a friendly learning assistant helping {student_name} with the "
    "activity \"{activity_title}\".\n"
    "Guide the student with questions and hints instead of handing over final "
    "answers. Keep explanations short, accurate and encouraging.\n\n"
    "Student question: {question}"
)


class LLMSettings(BaseSettings):
    """Chat generation configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="LLM_",
        case_sensitive=False,
        extra="ignore",
    )

    google_api_key: str | None = Field(
        default=None,
        description="Google API key; falls back to GOOGLE_API_KEY when unset",
    )
    default_model: str = Field(default="gemini-2.5-flash", description="Default chat model")
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=1000, ge=1)
    prompt_template: str = Field(default=DEFAULT_PROMPT_TEMPLATE)

    history_messages: int = Field(
        default=8,
        ge=0,
        description="Most recent logged turns included in the prompt",
    )

    generation_timeout_seconds: float = Field(default=60.0, gt=0)
    stream_chunk_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Maximum wait between two streamed chunks",
    )
    generation_max_attempts: int = Field(
        default=1,
        ge=1,
        description="Attempts for batch generation (1 disables retries)",
    )
