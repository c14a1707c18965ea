"""
Exception hierarchy for the education assistant service.

Every error the request pipeline can short-circuit with is a subclass of
EduAssistantError. Each class carries the HTTP status and the stable
machine-readable error code the API layer maps it to, so routers never
decide status codes themselves.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class EduAssistantError(Exception):
    """Base exception for all application errors."""

    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message (safe to return to clients)
            details: Optional dictionary of additional context for logging only
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(EduAssistantError):
    """Raised when request input is missing or malformed."""

    status_code = 400
    error_code = "validation_error"

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class AuthenticationError(EduAssistantError):
    """Raised when the caller's credential is absent, malformed or rejected."""

    status_code = 401
    error_code = "authentication_error"


class AuthorizationError(EduAssistantError):
    """Raised when an authenticated caller lacks the required role."""

    status_code = 403
    error_code = "authorization_error"


class NotFoundError(EduAssistantError):
    """Raised when a referenced entity does not exist."""

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        resource: str,
        resource_id: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize not found error.

        Args:
            resource: Human-readable resource name (e.g. "Student")
            resource_id: Identifier that was looked up
            details: Additional context
        """
        details = details or {}
        details[f"{resource.lower()}_id"] = resource_id
        self.resource = resource
        super().__init__(f"{resource} not found", details)


class RateLimitError(EduAssistantError):
    """Raised when an identity exceeds its request ceiling for the window."""

    status_code = 429
    error_code = "rate_limit_exceeded"

    def __init__(
        self,
        message: str = "Too many requests, try again later",
        retry_after: float | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.retry_after = retry_after
        super().__init__(message, details)


class UpstreamError(EduAssistantError):
    """Raised when an embedding, search or generation backend fails or times out."""

    status_code = 500
    error_code = "upstream_error"

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize upstream error.

        Args:
            message: Error message
            operation: Upstream operation that failed (embed, vector_search, generate)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        self.operation = operation
        super().__init__(message, details)


class PersistenceError(EduAssistantError):
    """Raised when writing to the chat log fails."""

    status_code = 500
    error_code = "persistence_error"
