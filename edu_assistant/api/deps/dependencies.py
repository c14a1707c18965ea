"""
Dependency injection container.

Factory functions for FastAPI dependencies. Long-lived collaborators (rate
limit store, embedding and generation clients, token verifier) live in a
ServiceCache; services are cheap and built per request around the shared
session factory.

Dependencies: edu_assistant.configs, edu_assistant.application, edu_assistant.boundary
System role: DI container for service injection
"""

from functools import partial

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from edu_assistant.application.services import (
    AdminService,
    ChatService,
    IdentityService,
    RetrievalService,
)
from edu_assistant.boundary.auth import TokenVerifier
from edu_assistant.boundary.db import get_async_session_factory
from edu_assistant.boundary.llm import GeminiGenerationBackend
from edu_assistant.boundary.vdb import ChunkVectorStore, QueryEmbedder, get_embeddings_client
from edu_assistant.configs import Settings, get_settings
from edu_assistant.core.rate_limiter import InMemoryRateLimitStore, RateLimiter


class ServiceCache:
    """Container for cached service instances."""

    def __init__(self, settings: Settings | None = None):
        self._settings = settings
        self._rate_limiter = None
        self._embedder = None
        self._vector_store = None
        self._generator = None
        self._verifier = None

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def rate_limiter(self) -> RateLimiter:
        """Get cached rate limiter (state shared by every request in this process)."""
        if self._rate_limiter is None:
            config = self.settings.rate_limit
            self._rate_limiter = RateLimiter(
                max_requests=config.max_requests,
                window_seconds=config.window_seconds,
                count_rejected=config.count_rejected,
                store=InMemoryRateLimitStore(max_tracked_keys=config.max_tracked_keys),
            )
        return self._rate_limiter

    @property
    def embedder(self) -> QueryEmbedder:
        """Get cached query embedder (the Google client is built on the first embedding)."""
        if self._embedder is None:
            config = self.settings.retrieval
            self._embedder = QueryEmbedder(
                embeddings=None,
                embeddings_factory=partial(
                    get_embeddings_client,
                    model=config.embedding_model,
                    dimension=config.embedding_dimension,
                    google_api_key=self.settings.llm.google_api_key,
                ),
                dimension=config.embedding_dimension,
                timeout_seconds=config.embedding_timeout_seconds,
                max_attempts=config.embedding_max_attempts,
            )
        return self._embedder

    @property
    def vector_store(self) -> ChunkVectorStore:
        if self._vector_store is None:
            self._vector_store = ChunkVectorStore()
        return self._vector_store

    @property
    def generator(self) -> GeminiGenerationBackend:
        """Get cached generation backend."""
        if self._generator is None:
            config = self.settings.llm
            self._generator = GeminiGenerationBackend(
                google_api_key=config.google_api_key,
                timeout_seconds=config.generation_timeout_seconds,
                max_attempts=config.generation_max_attempts,
            )
        return self._generator

    @property
    def verifier(self) -> TokenVerifier:
        if self._verifier is None:
            config = self.settings.auth
            self._verifier = TokenVerifier(
                secret=config.jwt_secret,
                algorithm=config.jwt_algorithm,
                audience=config.jwt_audience,
            )
        return self._verifier

    def clear(self) -> None:
        """Clear all cached instances."""
        self._rate_limiter = None
        self._embedder = None
        self._vector_store = None
        self._generator = None
        self._verifier = None


# Global service cache
_service_cache = ServiceCache()


def get_service_cache() -> ServiceCache:
    """Get service cache singleton."""
    return _service_cache


def get_settings_dependency() -> Settings:
    """Get settings singleton."""
    return get_settings()


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory for services that open their own transactions."""
    return get_async_session_factory()


def get_identity_service(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> IdentityService:
    return IdentityService(session_factory, get_service_cache().verifier)


def get_retrieval_service(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> RetrievalService:
    """
    Get retrieval service instance.

    Args:
        session_factory: Session factory (injected via Depends)

    Returns:
        RetrievalService: Hybrid vector + keyword retriever
    """
    cache = get_service_cache()
    config = cache.settings.retrieval
    return RetrievalService(
        session_factory=session_factory,
        embedder=cache.embedder,
        vector_store=cache.vector_store,
        keyword_score=config.keyword_score,
        search_timeout_seconds=config.search_timeout_seconds,
    )


def get_chat_service(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    identity_service: IdentityService = Depends(get_identity_service),
    retrieval_service: RetrievalService = Depends(get_retrieval_service),
) -> ChatService:
    """
    Get chat service instance.

    Args:
        session_factory: Session factory (injected via Depends)
        identity_service: Identity gate (injected via Depends)
        retrieval_service: Retriever used when a request sets useRag

    Returns:
        ChatService: Chat orchestrator
    """
    cache = get_service_cache()
    return ChatService(
        session_factory=session_factory,
        identity_service=identity_service,
        rate_limiter=cache.rate_limiter,
        generator=cache.generator,
        retrieval_service=retrieval_service,
        llm_settings=cache.settings.llm,
        retrieval_settings=cache.settings.retrieval,
    )


def get_admin_service(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    identity_service: IdentityService = Depends(get_identity_service),
) -> AdminService:
    return AdminService(session_factory, identity_service)
