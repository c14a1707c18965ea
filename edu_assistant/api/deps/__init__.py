"""API-specific dependencies."""

# Re-export common dependencies
from .dependencies import (
    ServiceCache,
    get_admin_service,
    get_chat_service,
    get_identity_service,
    get_retrieval_service,
    get_service_cache,
    get_session_factory,
    get_settings_dependency,
)

__all__ = [
    "ServiceCache",
    "get_admin_service",
    "get_chat_service",
    "get_identity_service",
    "get_retrieval_service",
    "get_service_cache",
    "get_session_factory",
    "get_settings_dependency",
]
