"""
pgvector similarity search over document chunks.

Calls the search_document_chunks SQL function created by create_tables.
Chunk ids are returned as strings so they compare equal to keyword hits.

Dependencies: sqlalchemy, edu_assistant.models.retrieval
System role: Vector search stage of the hybrid retriever
"""

import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from edu_assistant.models.retrieval import SearchOrigin, SearchResult

logger = logging.getLogger(__name__)

SEARCH_SQL = text(
    "SELECT id, document_name, content, similarity "
    "FROM search_document_chunks(CAST(:query_embedding AS vector), :match_threshold, :match_count)"
)


def to_vector_literal(embedding: list[float]) -> str:
    """Render an embedding in pgvector's text input format."""
    return "[" + ",".join(repr(float(value)) for value in embedding) + "]"


class ChunkVectorStore:
    """Similarity search against document_chunks.embedding."""

    async def similarity_search(
        self,
        session: AsyncSession,
        embedding: list[float],
        match_threshold: float,
        match_count: int,
    ) -> list[SearchResult]:
        """
        Return chunks more similar than the threshold, best first.

        Args:
            session: Async database session
            embedding: Query embedding
            match_threshold: Minimum cosine similarity (exclusive)
            match_count: Maximum results

        Returns:
            list[SearchResult]: Vector hits scored by similarity
        """
        result = await session.execute(
            SEARCH_SQL,
            {
                "query_embedding": to_vector_literal(embedding),
                "match_threshold": match_threshold,
                "match_count": match_count,
            },
        )

        hits = [
            SearchResult(
                id=str(row.id),
                document_name=row.document_name,
                content=row.content,
                score=float(row.similarity),
                origin=SearchOrigin.VECTOR,
            )
            for row in result
            if float(row.similarity) > match_threshold
        ]
        logger.info(
            f"{__name__}:similarity_search - Found {len(hits)} results",
            extra={"match_threshold": match_threshold, "match_count": match_count},
        )
        return hits[:match_count]
