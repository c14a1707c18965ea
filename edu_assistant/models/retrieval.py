"""
Retrieval domain models and schemas.

Search result shape shared by the hybrid retriever and the search endpoint.
Wire names are camelCase; Python attributes stay snake_case.

Dependencies: pydantic
System role: Retrieval API contracts
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class SearchOrigin(str, Enum):
    """Search stage that produced a result."""

    VECTOR = "vector"
    KEYWORD = "keyword"


class SearchResult(BaseModel):
    """Single chunk returned by the hybrid retriever."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(description="Chunk identifier")
    document_name: str = Field(default="", alias="documentName")
    content: str = Field(description="Chunk text content")
    score: float = Field(description="Similarity for vector hits, fixed score for keyword hits")
    origin: SearchOrigin = Field(alias="searchType")


class SearchTypeCounts(BaseModel):
    """How many merged results each stage contributed."""

    vector: int = 0
    keyword: int = 0


class RetrievalResult(BaseModel):
    """Merged, ranked and truncated retrieval output."""

    results: list[SearchResult] = Field(default_factory=list)
    search_types: SearchTypeCounts = Field(default_factory=SearchTypeCounts)
    vector_failed: bool = False
    keyword_failed: bool = False


class RagSearchRequest(BaseModel):
    """Request schema for the search endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    query: str | None = Field(default=None, description="Free-text search query")
    match_threshold: float | None = Field(
        default=None,
        alias="matchThreshold",
        ge=0.0,
        le=1.0,
    )
    match_count: int | None = Field(default=None, alias="matchCount", ge=1, le=50)


class RagSearchResponse(BaseModel):
    """Response schema for the search endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    results: list[SearchResult]
    query: str
    total_found: int = Field(alias="totalFound")
    search_types: SearchTypeCounts = Field(alias="searchTypes")
