"""
Test suite for RetrievalService.

Vector search is mocked (it needs pgvector); keyword search runs against
the in-memory SQLite database.

System role: Verification of the hybrid retriever
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import SQLAlchemyError

from edu_assistant.application.services.retrieval_service import RetrievalService
from edu_assistant.boundary.db.CRUD import document_chunk_crud
from edu_assistant.core.exceptions import UpstreamError, ValidationError
from edu_assistant.models.retrieval import SearchOrigin, SearchResult


@pytest.fixture
def embedder() -> AsyncMock:
    mock = AsyncMock()
    mock.embed.return_value = [0.1, 0.2, 0.3]
    return mock


@pytest.fixture
def vector_store() -> MagicMock:
    store = MagicMock()
    store.similarity_search = AsyncMock(return_value=[])
    return store


@pytest.fixture
def retrieval_service(session_factory, embedder: AsyncMock, vector_store: MagicMock) -> RetrievalService:
    return RetrievalService(
        session_factory=session_factory,
        embedder=embedder,
        vector_store=vector_store,
        keyword_score=0.5,
        search_timeout_seconds=1.0,
    )


def vector_hit(id: str, score: float) -> SearchResult:
    return SearchResult(id=id, document_name="biology.pdf", content="vector text", score=score, origin=SearchOrigin.VECTOR)


class TestRetrievalServiceSearch:
    """Test suite for successful hybrid search."""

    @pytest.mark.asyncio
    async def test_should_merge_vector_and_keyword_hits(
        self,
        retrieval_service: RetrievalService,
        vector_store: MagicMock,
        seeder,
    ) -> None:
        # Arrange
        first = await seeder.chunk("Photosynthesis needs light", chunk_index=0)
        second = await seeder.chunk("Light changes plant growth", chunk_index=1)
        vector_store.similarity_search.return_value = [vector_hit(str(first.id), 0.91)]

        # Act
        result = await retrieval_service.search("light", match_threshold=0.78, match_count=5)

        # Assert
        assert [r.id for r in result.results] == [str(first.id), str(second.id)]
        assert result.results[0].origin is SearchOrigin.VECTOR
        assert result.results[1].origin is SearchOrigin.KEYWORD
        assert result.results[1].score == 0.5
        assert result.search_types.vector == 1
        assert result.search_types.keyword == 1
        assert not result.vector_failed and not result.keyword_failed

    @pytest.mark.asyncio
    async def test_should_pass_threshold_and_count_to_vector_store(
        self,
        retrieval_service: RetrievalService,
        vector_store: MagicMock,
    ) -> None:
        # Act
        await retrieval_service.search("light", match_threshold=0.7, match_count=3)

        # Assert
        args = vector_store.similarity_search.await_args.args
        assert args[1:] == ([0.1, 0.2, 0.3], 0.7, 3)

    @pytest.mark.asyncio
    async def test_keyword_search_should_match_wildcards_literally(
        self,
        retrieval_service: RetrievalService,
        seeder,
    ) -> None:
        # Arrange
        await seeder.chunk("Growth was 100% in week one", chunk_index=0)
        await seeder.chunk("Growth was 100 units", chunk_index=1)

        # Act
        result = await retrieval_service.search("100%", match_count=5)

        # Assert
        assert [r.content for r in result.results] == ["Growth was 100% in week one"]


class TestRetrievalServiceDegradation:
    """Test suite for partial failures."""

    @pytest.mark.asyncio
    async def test_keyword_failure_should_return_vector_hits(
        self,
        retrieval_service: RetrievalService,
        vector_store: MagicMock,
    ) -> None:
        # Arrange
        vector_store.similarity_search.return_value = [vector_hit("a", 0.9)]

        # Act
        with patch.object(document_chunk_crud, "keyword_search", AsyncMock(side_effect=SQLAlchemyError("down"))):
            result = await retrieval_service.search("light")

        # Assert
        assert [r.id for r in result.results] == ["a"]
        assert result.keyword_failed is True
        assert result.vector_failed is False

    @pytest.mark.asyncio
    async def test_vector_failure_should_return_keyword_hits(
        self,
        retrieval_service: RetrievalService,
        vector_store: MagicMock,
        seeder,
    ) -> None:
        # Arrange
        await seeder.chunk("Light changes plant growth")
        vector_store.similarity_search.side_effect = SQLAlchemyError("function missing")

        # Act
        result = await retrieval_service.search("light")

        # Assert
        assert len(result.results) == 1
        assert result.results[0].origin is SearchOrigin.KEYWORD
        assert result.vector_failed is True

    @pytest.mark.asyncio
    async def test_slow_vector_search_should_time_out_and_degrade(
        self,
        session_factory,
        embedder: AsyncMock,
        vector_store: MagicMock,
        seeder,
    ) -> None:
        # Arrange
        await seeder.chunk("Light changes plant growth")

        async def slow_search(*args, **kwargs):
            await asyncio.sleep(1)
            return [vector_hit("late", 0.99)]

        vector_store.similarity_search.side_effect = slow_search
        service = RetrievalService(session_factory, embedder, vector_store, search_timeout_seconds=0.05)

        # Act
        result = await service.search("light")

        # Assert
        assert result.vector_failed is True
        assert [r.origin for r in result.results] == [SearchOrigin.KEYWORD]

    @pytest.mark.asyncio
    async def test_both_searches_failing_should_return_empty_result(
        self,
        retrieval_service: RetrievalService,
        vector_store: MagicMock,
    ) -> None:
        # Arrange
        vector_store.similarity_search.side_effect = SQLAlchemyError("function missing")

        # Act
        with patch.object(document_chunk_crud, "keyword_search", AsyncMock(side_effect=SQLAlchemyError("down"))):
            result = await retrieval_service.search("light")

        # Assert
        assert result.results == []
        assert result.vector_failed is True
        assert result.keyword_failed is True


class TestRetrievalServiceErrors:
    """Test suite for hard failures."""

    @pytest.mark.asyncio
    async def test_embedding_failure_should_propagate(
        self,
        retrieval_service: RetrievalService,
        embedder: AsyncMock,
        vector_store: MagicMock,
    ) -> None:
        # Arrange
        embedder.embed.side_effect = UpstreamError("Failed to generate query embedding", operation="embed")

        # Act
        with pytest.raises(UpstreamError):
            await retrieval_service.search("light")

        # Assert
        vector_store.similarity_search.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("query", ["", "   ", None])
    async def test_empty_query_should_fail_before_embedding(
        self,
        retrieval_service: RetrievalService,
        embedder: AsyncMock,
        query,
    ) -> None:
        # Act
        with pytest.raises(ValidationError) as exc_info:
            await retrieval_service.search(query)

        # Assert
        assert exc_info.value.message == "Query is required"
        embedder.embed.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_count_should_fail(self, retrieval_service: RetrievalService) -> None:
        with pytest.raises(ValidationError):
            await retrieval_service.search("light", match_count=0)
