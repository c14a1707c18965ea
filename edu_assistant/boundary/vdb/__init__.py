"""
Vector database boundary layer.

- FixedDimensionEmbeddings: Gemini embeddings pinned to the corpus dimension
- QueryEmbedder: async, time-bounded query embedding
- ChunkVectorStore: pgvector similarity search over document_chunks

Dependencies: langchain_google_genai, sqlalchemy, tenacity
System role: Vector store adapter for RAG retrieval
"""

from edu_assistant.boundary.vdb.chunk_store import ChunkVectorStore
from edu_assistant.boundary.vdb.query_embedder import QueryEmbedder


def get_embeddings_client(model: str, dimension: int, google_api_key: str | None = None):
    """Lazy import so tests never construct a Google client."""
    from edu_assistant.boundary.vdb.embeddings_wrapper import FixedDimensionEmbeddings

    kwargs = {"google_api_key": google_api_key} if google_api_key else {}
    return FixedDimensionEmbeddings(model=model, output_dimensionality=dimension, **kwargs)


__all__ = [
    "ChunkVectorStore",
    "QueryEmbedder",
    "get_embeddings_client",
]
