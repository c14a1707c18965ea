"""
Core business logic module.

Contains the exception hierarchy and the pure pipeline components
(rate limiting, sanitization, result merging, prompt assembly).
"""

from edu_assistant.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    EduAssistantError,
    NotFoundError,
    PersistenceError,
    RateLimitError,
    UpstreamError,
    ValidationError,
)

__all__ = [
    "EduAssistantError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "RateLimitError",
    "UpstreamError",
    "PersistenceError",
]
