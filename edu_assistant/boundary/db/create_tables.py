"""
Database table creation script.

Creates all ORM tables, then the pgvector pieces the ORM does not map: the
vector extension, the document_chunks.embedding column and the
search_document_chunks similarity function.

Dependencies: sqlalchemy, asyncpg, edu_assistant.configs
System role: Database schema initialization

Usage:
    python -m edu_assistant.boundary.db.create_tables
"""

import asyncio
import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

from edu_assistant.boundary.db.base import Base
from edu_assistant.boundary.db.connection import get_async_engine
from edu_assistant.configs import get_settings

# Import all models to register them with Base.metadata
import edu_assistant.boundary.db.models  # noqa: F401

logger = logging.getLogger(__name__)

SEARCH_FUNCTION_SQL = """
CREATE OR REPLACE FUNCTION search_document_chunks(
    query_embedding vector({dimension}),
    match_threshold float,
    match_count int
)
RETURNS TABLE (id uuid, document_name text, content text, similarity float)
LANGUAGE sql STABLE
AS $$
    SELECT
        document_chunks.id,
        document_chunks.document_name,
        document_chunks.content,
        1 - (document_chunks.embedding <=> query_embedding) AS similarity
    FROM document_chunks
    WHERE document_chunks.embedding IS NOT NULL
      AND 1 - (document_chunks.embedding <=> query_embedding) > match_threshold
    ORDER BY document_chunks.embedding <=> query_embedding
    LIMIT match_count;
$$;
"""


async def create_all_tables(engine: AsyncEngine | None = None) -> None:
    """
    Create all database tables and the vector search function.

    Idempotent: tables use CREATE TABLE IF NOT EXISTS, the column uses
    ADD COLUMN IF NOT EXISTS and the function is CREATE OR REPLACE.

    Raises:
        SQLAlchemyError: If database connection fails or table creation fails
    """
    engine = engine or get_async_engine()
    dimension = get_settings().retrieval.embedding_dimension

    async with engine.begin() as conn:
        await conn.execute(text("CREATE EXTENSION IF NOT EXISTS vector"))
        await conn.run_sync(Base.metadata.create_all)
        logger.info(f"{__name__}:create_all_tables - ORM tables created")

        await conn.execute(
            text(
                f"ALTER TABLE document_chunks "
                f"ADD COLUMN IF NOT EXISTS embedding vector({dimension})"
            )
        )
        await conn.execute(text(SEARCH_FUNCTION_SQL.format(dimension=dimension)))
        logger.info(f"{__name__}:create_all_tables - Vector column and search function created")


async def drop_all_tables(engine: AsyncEngine | None = None) -> None:
    """
    Drop all database tables and their data.

    WARNING: Irreversible data loss. Only use in development environments.
    """
    engine = engine or get_async_engine()
    async with engine.begin() as conn:
        await conn.execute(text("DROP FUNCTION IF EXISTS search_document_chunks"))
        await conn.run_sync(Base.metadata.drop_all)
    logger.info(f"{__name__}:drop_all_tables - All tables dropped")


if __name__ == "__main__":
    from edu_assistant.observability.logger import configure_logging

    configure_logging()
    asyncio.run(create_all_tables())
