"""Service orchestrators."""

from .admin_service import AdminService
from .chat_service import ChatService
from .identity_service import IdentityService
from .retrieval_service import RetrievalService

__all__ = [
    "AdminService",
    "ChatService",
    "IdentityService",
    "RetrievalService",
]
