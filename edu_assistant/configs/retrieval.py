"""
Retrieval configuration settings.

Embedding model, search thresholds and the timeout/retry policy applied to
the embedding and search calls of the hybrid retriever.

Dependencies: pydantic, pydantic_settings
System role: Hybrid retrieval configuration
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from edu_assistant.configs.base import BaseSettings


class RetrievalSettings(BaseSettings):
    """Hybrid (vector + keyword) retrieval configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="RETRIEVAL_",
        case_sensitive=False,
        extra="ignore",
    )

    embedding_model: str = Field(
        default="models/gemini-embedding-001",
        description="Google Gemini embedding model ID",
    )
    embedding_dimension: int = Field(
        default=1536,
        description="Embedding vector dimension (matches document_chunks.embedding)",
    )

    match_threshold: float = Field(
        default=0.78,
        ge=0.0,
        le=1.0,
        description="Default minimum similarity for the search endpoint",
    )
    match_count: int = Field(default=5, ge=1, description="Default result count for the search endpoint")

    chat_match_threshold: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Minimum similarity for context retrieved during chat",
    )
    chat_match_count: int = Field(default=3, ge=1, description="Chunks retrieved as chat context")

    keyword_score: float = Field(
        default=0.5,
        description="Fixed score assigned to keyword-only matches",
    )

    embedding_timeout_seconds: float = Field(default=15.0, gt=0)
    search_timeout_seconds: float = Field(default=10.0, gt=0)
    embedding_max_attempts: int = Field(
        default=1,
        ge=1,
        description="Attempts for the embedding call (1 disables retries)",
    )

    on_retrieval_failure: Literal["abort", "continue"] = Field(
        default="abort",
        description="Chat behaviour when retrieval fails: abort the request or answer without context",
    )
