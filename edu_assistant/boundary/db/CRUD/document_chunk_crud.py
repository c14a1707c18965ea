"""
Document chunk CRUD operations.

Read-only keyword access to the retrieval corpus.

Dependencies: sqlalchemy, edu_assistant.boundary.db.models
System role: Keyword search stage of the hybrid retriever
"""

from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from edu_assistant.boundary.db.CRUD.base_crud import BaseCRUD
from edu_assistant.boundary.db.models.document_chunk_model import DocumentChunkModel

LIKE_ESCAPE = "\\"


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so the term matches literally."""
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", f"{LIKE_ESCAPE}%")
        .replace("_", f"{LIKE_ESCAPE}_")
    )


class DocumentChunkCRUD(BaseCRUD[DocumentChunkModel]):
    """CRUD operations for DocumentChunkModel."""

    def __init__(self) -> None:
        super().__init__(DocumentChunkModel)

    async def keyword_search(
        self,
        session: AsyncSession,
        query: str,
        limit: int,
    ) -> Sequence[DocumentChunkModel]:
        """
        Case-insensitive substring match on chunk content.

        Args:
            session: Async database session
            query: Literal search term
            limit: Maximum number of chunks

        Returns:
            Matching chunks in document order
        """
        pattern = f"%{escape_like(query)}%"
        stmt = (
            select(DocumentChunkModel)
            .where(DocumentChunkModel.content.ilike(pattern, escape=LIKE_ESCAPE))
            .order_by(DocumentChunkModel.document_name, DocumentChunkModel.chunk_index)
            .limit(limit)
        )
        result = await session.execute(stmt)
        return result.scalars().all()


document_chunk_crud = DocumentChunkCRUD()
