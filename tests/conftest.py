"""
Shared test fixtures and configuration for entire test suite.

Provides: in-memory SQLite session factory, row seeding, token helpers,
fake generation backend
Dependencies: pytest, pytest-asyncio, sqlalchemy, aiosqlite
System role: Test infrastructure and fixture management
"""

import uuid
from collections.abc import AsyncIterator, Sequence

import pytest
from langchain_core.messages import BaseMessage

from edu_assistant.boundary.auth import TokenVerifier
from edu_assistant.boundary.db.CRUD import (
    activity_crud,
    chat_message_crud,
    class_prompt_settings_crud,
    document_chunk_crud,
    student_crud,
    user_role_crud,
)
from edu_assistant.boundary.llm.chat_model import GenerationResult
from edu_assistant.core.exceptions import UpstreamError
from edu_assistant.core.prompt import PromptSettings

TEST_JWT_SECRET = "test-secret"
TEST_AUDIENCE = "authenticated"


@pytest.fixture
async def session_factory():
    """
    Create in-memory SQLite async database for testing.

    Yields:
        async_sessionmaker: Factory bound to a fresh schema
    """
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
    from sqlalchemy.pool import StaticPool

    import edu_assistant.boundary.db.models  # noqa: F401  registers tables on Base.metadata
    from edu_assistant.boundary.db.base import Base

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    yield factory

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def test_async_db(session_factory):
    """Single session on the in-memory database."""
    async with session_factory() as session:
        yield session
        await session.rollback()


class Seeder:
    """Insert rows through the CRUD singletons, one committed session each."""

    def __init__(self, session_factory) -> None:
        self._session_factory = session_factory

    async def _create(self, crud, **values):
        async with self._session_factory() as db:
            row = await crud.create(db, **values)
            await db.commit()
        return row

    async def student(
        self,
        user_id: uuid.UUID | None = None,
        name: str = "Ada",
        class_name: str | None = "7A",
    ):
        return await self._create(
            student_crud,
            user_id=user_id,
            name=name,
            student_id=f"S-{uuid.uuid4().hex[:8]}",
            class_name=class_name,
        )

    async def activity(self, title: str = "Plant growth", type: str = "experiment", is_active: bool = True):
        return await self._create(activity_crud, title=title, type=type, is_active=is_active)

    async def role(self, user_id: uuid.UUID, role: str):
        return await self._create(user_role_crud, user_id=user_id, role=role)

    async def prompt_settings(self, class_name: str, activity_type: str, **overrides):
        values = {"prompt_template": "Coach {student_name} on {activity_title}: {question}"}
        values.update(overrides)
        return await self._create(
            class_prompt_settings_crud,
            class_name=class_name,
            activity_type=activity_type,
            **values,
        )

    async def chunk(self, content: str, document_name: str = "biology.pdf", chunk_index: int = 0):
        return await self._create(
            document_chunk_crud,
            document_name=document_name,
            chunk_index=chunk_index,
            content=content,
        )

    async def message(
        self,
        student_id: uuid.UUID,
        role: str,
        content: str,
        activity_id: uuid.UUID | None = None,
    ):
        return await self._create(
            chat_message_crud,
            student_id=student_id,
            activity_id=activity_id,
            role=role,
            content=content,
        )


@pytest.fixture
def seeder(session_factory) -> Seeder:
    return Seeder(session_factory)


@pytest.fixture
def verifier() -> TokenVerifier:
    return TokenVerifier(secret=TEST_JWT_SECRET, audience=TEST_AUDIENCE)


@pytest.fixture
def auth_header(verifier: TokenVerifier):
    """Build an Authorization header value for a user id."""

    def _make(user_id: uuid.UUID, email: str | None = "student@example.com") -> str:
        return f"Bearer {verifier.create_token(user_id, email=email)}"

    return _make


class FakeGenerator:
    """
    In-process generation backend.

    Records every call; stream() yields the configured tokens and optionally
    raises after them.
    """

    def __init__(
        self,
        answer: str = "Plants need light.",
        tokens: Sequence[str] = ("Plants ", "need ", "light."),
        tokens_used: int = 42,
        stream_error: Exception | None = None,
    ) -> None:
        self.answer = answer
        self.tokens = list(tokens)
        self.tokens_used = tokens_used
        self.stream_error = stream_error
        self.generate_calls: list[tuple[list[BaseMessage], PromptSettings]] = []
        self.stream_calls: list[tuple[list[BaseMessage], PromptSettings]] = []
        self.yielded = 0
        self.closed = False

    @staticmethod
    def supports(model: str) -> bool:
        return model.startswith("gemini")

    async def generate(self, messages, settings: PromptSettings) -> GenerationResult:
        self.generate_calls.append((list(messages), settings))
        return GenerationResult(text=self.answer, tokens_used=self.tokens_used, model=settings.model)

    async def stream(self, messages, settings: PromptSettings) -> AsyncIterator[str]:
        self.stream_calls.append((list(messages), settings))
        try:
            for token in self.tokens:
                self.yielded += 1
                yield token
            if self.stream_error is not None:
                raise self.stream_error
        finally:
            self.closed = True


class FailingGenerator(FakeGenerator):
    async def generate(self, messages, settings: PromptSettings) -> GenerationResult:
        self.generate_calls.append((list(messages), settings))
        raise UpstreamError("Generation backend failed", operation="generate")


@pytest.fixture
def fake_generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture
def failing_generator() -> FailingGenerator:
    return FailingGenerator()


@pytest.fixture
def make_generator():
    """Factory for generators with custom tokens or stream failures."""
    return FakeGenerator
