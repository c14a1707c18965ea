"""
Document chunk ORM model.

Chunks are written by the ingestion pipeline and read-only to this service.
The embedding column (pgvector) is not mapped: similarity search goes through
the search_document_chunks SQL function, keyword search through this model.

Dependencies: sqlalchemy, edu_assistant.boundary.db.base
System role: Retrieval corpus
"""

from sqlalchemy import JSON, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from edu_assistant.boundary.db.base import Base, CreatedAtMixin, UUIDMixin


class DocumentChunkModel(Base, UUIDMixin, CreatedAtMixin):
    """
    Attributes:
        document_name: Source document filename
        chunk_index: Position of the chunk inside its document
        content: Chunk text
        chunk_metadata: Free-form metadata (column "metadata")
    """

    __tablename__ = "document_chunks"

    document_name: Mapped[str] = mapped_column(String(255), nullable=False)
    chunk_index: Mapped[int] = mapped_column(Integer, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    chunk_metadata: Mapped[dict | None] = mapped_column("metadata", JSON, nullable=True)
