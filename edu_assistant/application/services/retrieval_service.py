"""
Hybrid retrieval service.

Runs the vector and keyword searches for a query and merges them into one
ranked, duplicate-free list.

Failure policy:
- embedding failure: the whole retrieval fails (UpstreamError)
- vector search failure: logged, keyword results only
- keyword search failure: logged, vector results only

Dependencies: edu_assistant.boundary.vdb, edu_assistant.boundary.db, edu_assistant.core.retriever
System role: Hybrid retriever orchestration
"""

import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from edu_assistant.boundary.db.CRUD.document_chunk_crud import document_chunk_crud
from edu_assistant.boundary.vdb.chunk_store import ChunkVectorStore
from edu_assistant.boundary.vdb.query_embedder import QueryEmbedder
from edu_assistant.core.exceptions import ValidationError
from edu_assistant.core.retriever import count_origins, merge_results
from edu_assistant.models.retrieval import RetrievalResult, SearchOrigin, SearchResult

logger = logging.getLogger(__name__)


class RetrievalService:
    """Hybrid vector + keyword retrieval over document chunks."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        embedder: QueryEmbedder,
        vector_store: ChunkVectorStore | None = None,
        keyword_score: float = 0.5,
        search_timeout_seconds: float = 10.0,
    ) -> None:
        """
        Initialize retrieval service.

        Args:
            session_factory: Factory for database sessions (one per search stage)
            embedder: Query embedder with its own timeout/retry policy
            vector_store: pgvector search adapter
            keyword_score: Score assigned to keyword-only hits
            search_timeout_seconds: Timeout for each search stage
        """
        self._session_factory = session_factory
        self._embedder = embedder
        self._vector_store = vector_store or ChunkVectorStore()
        self.keyword_score = keyword_score
        self.search_timeout_seconds = search_timeout_seconds

    async def search(
        self,
        query: str,
        match_threshold: float = 0.78,
        match_count: int = 5,
    ) -> RetrievalResult:
        """
        Retrieve the best chunks for a query.

        Flow:
        1. Embed the query (hard failure)
        2. Vector and keyword searches run concurrently (each may degrade)
        3. Merge, rank and truncate

        Args:
            query: Sanitized search text
            match_threshold: Minimum similarity for vector hits (exclusive)
            match_count: Maximum results

        Returns:
            RetrievalResult: Ranked results and per-origin counts

        Raises:
            ValidationError: Empty query or invalid parameters
            UpstreamError: Embedding failed
        """
        if not query or not query.strip():
            raise ValidationError("Query is required", field="query")
        if match_count < 1:
            raise ValidationError("matchCount must be at least 1", field="matchCount")
        if not 0.0 <= match_threshold <= 1.0:
            raise ValidationError("matchThreshold must be between 0 and 1", field="matchThreshold")

        logger.info(
            f"{__name__}:search - START",
            extra={"query_len": len(query), "match_threshold": match_threshold, "match_count": match_count},
        )

        embedding = await self._embedder.embed(query)

        vector_outcome, keyword_outcome = await asyncio.gather(
            self._vector_search(embedding, match_threshold, match_count),
            self._keyword_search(query, match_count),
            return_exceptions=True,
        )

        vector_results = self._unwrap(vector_outcome, SearchOrigin.VECTOR)
        keyword_results = self._unwrap(keyword_outcome, SearchOrigin.KEYWORD)

        merged = merge_results(vector_results or [], keyword_results or [], match_count)
        result = RetrievalResult(
            results=merged,
            search_types=count_origins(merged),
            vector_failed=vector_results is None,
            keyword_failed=keyword_results is None,
        )

        logger.info(
            f"{__name__}:search - END",
            extra={
                "total_found": len(merged),
                "vector": result.search_types.vector,
                "keyword": result.search_types.keyword,
                "vector_failed": result.vector_failed,
                "keyword_failed": result.keyword_failed,
            },
        )
        return result

    def _unwrap(
        self,
        outcome: list[SearchResult] | BaseException,
        origin: SearchOrigin,
    ) -> list[SearchResult] | None:
        if isinstance(outcome, asyncio.CancelledError):
            raise outcome
        if isinstance(outcome, BaseException):
            logger.warning(
                f"{__name__}:search - {origin.value} search failed, continuing without it: "
                f"{type(outcome).__name__}: {outcome}"
            )
            return None
        return outcome

    async def _vector_search(
        self,
        embedding: list[float],
        match_threshold: float,
        match_count: int,
    ) -> list[SearchResult]:
        async with self._session_factory() as db:
            return await asyncio.wait_for(
                self._vector_store.similarity_search(db, embedding, match_threshold, match_count),
                timeout=self.search_timeout_seconds,
            )

    async def _keyword_search(self, query: str, match_count: int) -> list[SearchResult]:
        async with self._session_factory() as db:
            rows = await asyncio.wait_for(
                document_chunk_crud.keyword_search(db, query.strip(), match_count),
                timeout=self.search_timeout_seconds,
            )
        return [
            SearchResult(
                id=str(row.id),
                document_name=row.document_name,
                content=row.content,
                score=self.keyword_score,
                origin=SearchOrigin.KEYWORD,
            )
            for row in rows
        ]
