"""
Query embedding with timeout and retry policy.

Runs the blocking Gemini embedding call in the threadpool, bounds it with a
timeout and retries only as often as configured. Any failure, including a
vector of the wrong width, surfaces as UpstreamError.

Dependencies: langchain_google_genai, tenacity, fastapi
System role: Embedding step of the hybrid retriever
"""

import asyncio
import logging
import math
from collections.abc import Callable
from typing import Protocol

from fastapi.concurrency import run_in_threadpool
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential_jitter

from edu_assistant.core.exceptions import UpstreamError

logger = logging.getLogger(__name__)


class SupportsEmbedQuery(Protocol):
    def embed_query(self, text: str) -> list[float]: ...


class QueryEmbedder:
    """Async facade over a synchronous LangChain embeddings client."""

    def __init__(
        self,
        embeddings: SupportsEmbedQuery | None,
        dimension: int,
        timeout_seconds: float = 15.0,
        max_attempts: int = 1,
        embeddings_factory: Callable[[], SupportsEmbedQuery] | None = None,
    ) -> None:
        """
        Args:
            embeddings: LangChain embeddings client, or None to build one from embeddings_factory
            dimension: Expected vector width
            timeout_seconds: Per-attempt timeout
            max_attempts: Total attempts (1 means no retry)
            embeddings_factory: Builds the client on first use
        """
        if embeddings is None and embeddings_factory is None:
            raise ValueError("embeddings or embeddings_factory is required")
        self._embeddings = embeddings
        self._embeddings_factory = embeddings_factory
        self.dimension = dimension
        self.timeout_seconds = timeout_seconds
        self.max_attempts = max_attempts

    def _client(self) -> SupportsEmbedQuery:
        if self._embeddings is None:
            self._embeddings = self._embeddings_factory()
        return self._embeddings

    async def _embed_once(self, text: str) -> list[float]:
        return await asyncio.wait_for(
            run_in_threadpool(self._client().embed_query, text),
            timeout=self.timeout_seconds,
        )

    async def embed(self, text: str) -> list[float]:
        """
        Embed a search query.

        Args:
            text: Query text

        Returns:
            list[float]: Embedding of the configured dimension

        Raises:
            UpstreamError: Provider failure, timeout, or malformed vector
        """
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.max_attempts),
                wait=wait_exponential_jitter(initial=0.5, max=8, jitter=1),
                before_sleep=lambda retry_state: logger.warning(
                    f"{__name__}:embed - Retry {retry_state.attempt_number}/{self.max_attempts}"
                ),
                reraise=True,
            ):
                with attempt:
                    vector = await self._embed_once(text)
        except asyncio.TimeoutError as e:
            logger.error(f"{__name__}:embed - Timed out after {self.timeout_seconds}s")
            raise UpstreamError("Embedding request timed out", operation="embed") from e
        except Exception as e:
            logger.error(f"{__name__}:embed - {type(e).__name__}: {e}")
            raise UpstreamError("Failed to generate query embedding", operation="embed") from e

        self._validate(vector)
        return [float(value) for value in vector]

    def _validate(self, vector: object) -> None:
        if not isinstance(vector, (list, tuple)) or len(vector) != self.dimension:
            size = len(vector) if isinstance(vector, (list, tuple)) else None
            logger.error(
                f"{__name__}:_validate - Malformed embedding",
                extra={"expected": self.dimension, "received": size},
            )
            raise UpstreamError(
                "Embedding backend returned a malformed vector",
                operation="embed",
                details={"expected": self.dimension, "received": size},
            )
        if not all(isinstance(v, (int, float)) and math.isfinite(v) for v in vector):
            raise UpstreamError(
                "Embedding backend returned non-numeric values",
                operation="embed",
            )
