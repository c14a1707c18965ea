"""API routers."""

from .admin import router as admin_router
from .chat import router as chat_router
from .health import router as health_router
from .rag_search import router as rag_search_router

__all__ = [
    "admin_router",
    "chat_router",
    "health_router",
    "rag_search_router",
]
