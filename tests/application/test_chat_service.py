"""
Test suite for ChatService.

Runs the whole pipeline against the in-memory database with a real identity
gate and rate limiter. Generation is a fake backend; retrieval is mocked.

System role: Verification of chat service orchestration layer
"""

import asyncio
import uuid
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from edu_assistant.application.services.chat_service import ChatService, validate_chat_request
from edu_assistant.application.services.identity_service import IdentityService
from edu_assistant.application.services.retrieval_service import RetrievalService
from edu_assistant.boundary.db.CRUD import chat_message_crud
from edu_assistant.boundary.db.models import QuestionFrequencyModel, StudentSessionModel
from edu_assistant.boundary.db.models.user_role_model import Role
from edu_assistant.configs.llm import LLMSettings
from edu_assistant.configs.retrieval import RetrievalSettings
from edu_assistant.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    RateLimitError,
    UpstreamError,
    ValidationError,
)
from edu_assistant.core.rate_limiter import RateLimiter
from edu_assistant.models.chat import ChatRequest
from edu_assistant.models.retrieval import RetrievalResult, SearchOrigin, SearchResult, SearchTypeCounts
from edu_assistant.models.streaming import StreamEventType


@pytest.fixture
def identity_service(session_factory, verifier) -> IdentityService:
    return IdentityService(session_factory, verifier)


@pytest.fixture
def retrieval_service() -> AsyncMock:
    service = AsyncMock(spec=RetrievalService)
    service.search.return_value = RetrievalResult(
        results=[
            SearchResult(
                id="chunk-1",
                document_name="biology.pdf",
                content="Chlorophyll absorbs red and blue light.",
                score=0.88,
                origin=SearchOrigin.VECTOR,
            )
        ],
        search_types=SearchTypeCounts(vector=1),
    )
    return service


@pytest.fixture
def build_service(session_factory, identity_service, fake_generator, retrieval_service):
    """Build a ChatService, overriding any collaborator."""

    def _build(**overrides) -> ChatService:
        values = {
            "session_factory": session_factory,
            "identity_service": identity_service,
            "rate_limiter": RateLimiter(max_requests=20, window_seconds=60),
            "generator": fake_generator,
            "retrieval_service": retrieval_service,
            "llm_settings": LLMSettings(),
            "retrieval_settings": RetrievalSettings(),
        }
        values.update(overrides)
        return ChatService(**values)

    return _build


@pytest.fixture
def chat_service(build_service) -> ChatService:
    return build_service()


@pytest.fixture
async def student_caller(seeder, auth_header):
    """A student linked to the calling user, plus that user's header."""
    user_id = uuid.uuid4()
    student = await seeder.student(user_id=user_id, name="Ada", class_name="7A")
    return student, auth_header(user_id)


def chat_request(student_id, message: str = "Why do plants need light?", **fields) -> ChatRequest:
    return ChatRequest(message=message, student_id=str(student_id), **fields)


async def logged_messages(session_factory, student_id):
    async with session_factory() as db:
        return await chat_message_crud.get_recent(db, student_id, limit=50)


class TestValidateChatRequest:
    """Test suite for required-field validation."""

    @pytest.mark.parametrize(
        "request_data",
        [
            {"studentId": str(uuid.uuid4())},
            {"message": "hello"},
            {"message": "   ", "studentId": str(uuid.uuid4())},
            {},
        ],
    )
    def test_missing_fields_should_raise(self, request_data: dict) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_chat_request(ChatRequest(**request_data))

        assert exc_info.value.message == "Message and studentId are required"

    def test_malformed_ids_should_raise(self) -> None:
        with pytest.raises(ValidationError):
            validate_chat_request(ChatRequest(message="hi", studentId="not-a-uuid"))
        with pytest.raises(ValidationError):
            validate_chat_request(ChatRequest(message="hi", studentId=str(uuid.uuid4()), activityId="nope"))


class TestChatServiceFailFast:
    """Test suite for failures detected before any backend call."""

    @pytest.mark.asyncio
    async def test_missing_message_should_not_contact_any_backend(self, build_service, fake_generator, retrieval_service) -> None:
        # Arrange
        identity = AsyncMock(spec=IdentityService)
        service = build_service(identity_service=identity)

        # Act
        with pytest.raises(ValidationError) as exc_info:
            await service.process_chat(ChatRequest(studentId=str(uuid.uuid4()), useRag=True), "Bearer x")

        # Assert
        assert exc_info.value.status_code == 400
        identity.authenticate.assert_not_awaited()
        retrieval_service.search.assert_not_awaited()
        assert fake_generator.generate_calls == []

    @pytest.mark.asyncio
    async def test_missing_credential_should_raise_401(self, chat_service: ChatService, student_caller) -> None:
        # Arrange
        student, _ = student_caller

        # Act / Assert
        with pytest.raises(AuthenticationError):
            await chat_service.process_chat(chat_request(student.id), None)

    @pytest.mark.asyncio
    async def test_should_reject_after_rate_ceiling(self, build_service, student_caller, session_factory) -> None:
        # Arrange
        student, header = student_caller
        service = build_service(rate_limiter=RateLimiter(max_requests=1, window_seconds=60))
        await service.process_chat(chat_request(student.id), header)

        # Act
        with pytest.raises(RateLimitError) as exc_info:
            await service.process_chat(chat_request(student.id), header)

        # Assert
        assert exc_info.value.retry_after is not None
        assert len(await logged_messages(session_factory, student.id)) == 2

    @pytest.mark.asyncio
    async def test_message_empty_after_sanitizing_should_raise(self, chat_service: ChatService, student_caller) -> None:
        # Arrange
        student, header = student_caller

        # Act / Assert
        with pytest.raises(ValidationError):
            await chat_service.process_chat(chat_request(student.id, message="<script>alert(1)</script>"), header)

    @pytest.mark.asyncio
    async def test_unknown_student_should_raise_404(self, chat_service: ChatService, auth_header, fake_generator) -> None:
        # Act
        with pytest.raises(NotFoundError) as exc_info:
            await chat_service.process_chat(chat_request(uuid.uuid4()), auth_header(uuid.uuid4()))

        # Assert
        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "Student not found"
        assert fake_generator.generate_calls == []

    @pytest.mark.asyncio
    async def test_unknown_activity_should_answer_with_defaults(
        self,
        chat_service: ChatService,
        student_caller,
        session_factory,
        fake_generator,
    ) -> None:
        # Arrange
        student, header = student_caller

        # Act
        result = await chat_service.process_chat(chat_request(student.id, activityId=str(uuid.uuid4())), header)

        # Assert
        assert result.response == "Plants need light."
        system_prompt = fake_generator.generate_calls[0][0][0].content
        assert "General learning" in system_prompt
        logged = await logged_messages(session_factory, student.id)
        assert [message.role for message in logged] == ["user", "assistant"]
        assert all(message.activity_id is None for message in logged)


class TestChatServiceOwnership:
    """Test suite for acting on behalf of a student."""

    @pytest.mark.asyncio
    async def test_other_users_student_should_be_forbidden(self, chat_service: ChatService, seeder, auth_header) -> None:
        # Arrange
        student = await seeder.student(user_id=uuid.uuid4())

        # Act / Assert
        with pytest.raises(AuthorizationError):
            await chat_service.process_chat(chat_request(student.id), auth_header(uuid.uuid4()))

    @pytest.mark.asyncio
    async def test_admin_may_chat_for_any_student(self, chat_service: ChatService, seeder, auth_header) -> None:
        # Arrange
        admin_id = uuid.uuid4()
        await seeder.role(admin_id, Role.ADMIN.value)
        student = await seeder.student(user_id=uuid.uuid4())

        # Act
        result = await chat_service.process_chat(chat_request(student.id), auth_header(admin_id))

        # Assert
        assert result.response == "Plants need light."


class TestChatServiceBatch:
    """Test suite for batch chat."""

    @pytest.mark.asyncio
    async def test_should_return_answer_with_metadata(self, chat_service: ChatService, student_caller) -> None:
        # Arrange
        student, header = student_caller

        # Act
        result = await chat_service.process_chat(chat_request(student.id), header)

        # Assert
        assert result.response == "Plants need light."
        assert result.tokens_used == 42
        assert result.model == "gemini-2.5-flash"
        assert result.rag_used is False
        assert result.to_response().model_dump(by_alias=True) == {
            "response": "Plants need light.",
            "tokensUsed": 42,
            "model": "gemini-2.5-flash",
            "ragUsed": False,
        }

    @pytest.mark.asyncio
    async def test_should_log_exactly_user_then_assistant(
        self,
        chat_service: ChatService,
        student_caller,
        session_factory,
    ) -> None:
        # Arrange
        student, header = student_caller

        # Act
        await chat_service.process_chat(chat_request(student.id, message="<b>Why</b> is grass green?"), header)

        # Assert
        rows = await logged_messages(session_factory, student.id)
        assert [(row.role, row.content) for row in rows] == [
            ("user", "Why is grass green?"),
            ("assistant", "Plants need light."),
        ]
        assert rows[1].model_used == "gemini-2.5-flash"
        assert rows[1].tokens_used == 42

    @pytest.mark.asyncio
    async def test_prompt_should_include_student_and_history(
        self,
        chat_service: ChatService,
        student_caller,
        seeder,
        fake_generator,
    ) -> None:
        # Arrange
        student, header = student_caller
        await seeder.message(student.id, "user", "What is a leaf?")
        await seeder.message(student.id, "assistant", "A leaf makes food.")

        # Act
        await chat_service.process_chat(chat_request(student.id), header)

        # Assert
        messages, settings = fake_generator.generate_calls[0]
        assert "Ada" in messages[0].content
        assert [m.content for m in messages[1:]] == [
            "What is a leaf?",
            "A leaf makes food.",
            "Why do plants need light?",
        ]
        assert settings.temperature == 0.7

    @pytest.mark.asyncio
    async def test_class_prompt_settings_should_override_defaults(
        self,
        chat_service: ChatService,
        student_caller,
        seeder,
        fake_generator,
    ) -> None:
        # Arrange
        student, header = student_caller
        activity = await seeder.activity(title="Plant growth", type="experiment")
        await seeder.prompt_settings("7A", "experiment", ai_model="gemini-1.5-pro", temperature=0.2, max_tokens=256)

        # Act
        result = await chat_service.process_chat(chat_request(student.id, activityId=str(activity.id)), header)

        # Assert
        messages, settings = fake_generator.generate_calls[0]
        assert settings.model == "gemini-1.5-pro"
        assert settings.temperature == 0.2
        assert settings.max_tokens == 256
        assert messages[0].content == "Coach Ada on Plant growth: Why do plants need light?"
        assert result.model == "gemini-1.5-pro"

    @pytest.mark.asyncio
    async def test_unsupported_model_should_fail_without_logging(
        self,
        chat_service: ChatService,
        student_caller,
        seeder,
        session_factory,
        fake_generator,
    ) -> None:
        # Arrange
        student, header = student_caller
        activity = await seeder.activity(type="discussion")
        await seeder.prompt_settings("7A", "discussion", ai_model="gpt-4o")

        # Act
        with pytest.raises(UpstreamError) as exc_info:
            await chat_service.process_chat(chat_request(student.id, activityId=str(activity.id)), header)

        # Assert
        assert exc_info.value.message == "Unsupported AI model: gpt-4o"
        assert fake_generator.generate_calls == []
        assert await logged_messages(session_factory, student.id) == []

    @pytest.mark.asyncio
    async def test_generation_failure_should_log_nothing(
        self,
        build_service,
        failing_generator,
        student_caller,
        session_factory,
    ) -> None:
        # Arrange
        student, header = student_caller
        service = build_service(generator=failing_generator)

        # Act
        with pytest.raises(UpstreamError):
            await service.process_chat(chat_request(student.id), header)

        # Assert
        assert await logged_messages(session_factory, student.id) == []

    @pytest.mark.asyncio
    async def test_log_failure_should_not_fail_response(self, chat_service: ChatService, student_caller) -> None:
        # Arrange
        student, header = student_caller

        # Act
        with patch.object(chat_message_crud, "create", AsyncMock(side_effect=SQLAlchemyError("disk full"))) as create:
            result = await chat_service.process_chat(chat_request(student.id), header)

        # Assert
        assert result.response == "Plants need light."
        # the assistant turn is skipped once the user turn could not be stored
        assert create.await_count == 1

    @pytest.mark.asyncio
    async def test_should_track_question_and_touch_session(
        self,
        chat_service: ChatService,
        student_caller,
        session_factory,
    ) -> None:
        # Arrange
        student, header = student_caller

        # Act
        await chat_service.process_chat(chat_request(student.id), header)
        await chat_service.process_chat(chat_request(student.id), header)

        # Assert
        async with session_factory() as db:
            frequency = (await db.execute(select(QuestionFrequencyModel))).scalar_one()
            session_row = (await db.execute(select(StudentSessionModel))).scalar_one()
        assert frequency.frequency_count == 2
        assert frequency.question_text == "Why do plants need light?"
        assert session_row.student_id == student.id
        assert session_row.is_active is True


class TestChatServiceRetrieval:
    """Test suite for retrieval grounding."""

    @pytest.mark.asyncio
    async def test_should_ground_prompt_when_requested(
        self,
        chat_service: ChatService,
        student_caller,
        retrieval_service: AsyncMock,
        fake_generator,
    ) -> None:
        # Arrange
        student, header = student_caller

        # Act
        result = await chat_service.process_chat(chat_request(student.id, useRag=True), header)

        # Assert
        retrieval_service.search.assert_awaited_once_with(
            "Why do plants need light?",
            match_threshold=0.7,
            match_count=3,
        )
        system_prompt = fake_generator.generate_calls[0][0][0].content
        assert "References:\n- Chlorophyll absorbs red and blue light." in system_prompt
        assert result.rag_used is True

    @pytest.mark.asyncio
    async def test_should_skip_retrieval_by_default(
        self,
        chat_service: ChatService,
        student_caller,
        retrieval_service: AsyncMock,
    ) -> None:
        # Arrange
        student, header = student_caller

        # Act
        await chat_service.process_chat(chat_request(student.id), header)

        # Assert
        retrieval_service.search.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_retrieval_failure_should_abort_by_default(
        self,
        chat_service: ChatService,
        student_caller,
        retrieval_service: AsyncMock,
        fake_generator,
    ) -> None:
        # Arrange
        student, header = student_caller
        retrieval_service.search.side_effect = UpstreamError("Failed to generate query embedding", operation="embed")

        # Act
        with pytest.raises(UpstreamError):
            await chat_service.process_chat(chat_request(student.id, useRag=True), header)

        # Assert
        assert fake_generator.generate_calls == []

    @pytest.mark.asyncio
    async def test_retrieval_failure_can_continue_without_references(
        self,
        build_service,
        student_caller,
        retrieval_service: AsyncMock,
    ) -> None:
        # Arrange
        student, header = student_caller
        retrieval_service.search.side_effect = UpstreamError("Failed to generate query embedding", operation="embed")
        service = build_service(retrieval_settings=RetrievalSettings(on_retrieval_failure="continue"))

        # Act
        result = await service.process_chat(chat_request(student.id, useRag=True), header)

        # Assert
        assert result.rag_used is False
        assert result.response == "Plants need light."


class TestChatServiceStream:
    """Test suite for streamed chat."""

    @pytest.mark.asyncio
    async def test_should_emit_context_tokens_then_complete(
        self,
        chat_service: ChatService,
        student_caller,
        session_factory,
    ) -> None:
        # Arrange
        student, header = student_caller
        exchange = await chat_service.prepare_exchange(chat_request(student.id, stream=True, useRag=True), header)

        # Act
        events = [event async for event in chat_service.stream_chat(exchange)]

        # Assert
        assert [event.event for event in events] == [
            StreamEventType.CONTEXT,
            StreamEventType.TOKEN,
            StreamEventType.TOKEN,
            StreamEventType.TOKEN,
            StreamEventType.COMPLETE,
        ]
        assert [event.data["token"] for event in events[1:4]] == ["Plants ", "need ", "light."]
        assert [event.data["index"] for event in events[1:4]] == [0, 1, 2]
        assert events[0].data["chunks"][0]["documentName"] == "biology.pdf"
        assert events[-1].data["full_answer"] == "Plants need light."
        assert sum(event.is_terminal for event in events) == 1

        rows = await logged_messages(session_factory, student.id)
        assert [(row.role, row.content) for row in rows] == [
            ("user", "Why do plants need light?"),
            ("assistant", "Plants need light."),
        ]

    @pytest.mark.asyncio
    async def test_should_not_emit_context_without_retrieval(self, chat_service: ChatService, student_caller) -> None:
        # Arrange
        student, header = student_caller
        exchange = await chat_service.prepare_exchange(chat_request(student.id, stream=True), header)

        # Act
        events = [event async for event in chat_service.stream_chat(exchange)]

        # Assert
        assert events[0].event is StreamEventType.TOKEN
        assert events[-1].event is StreamEventType.COMPLETE

    @pytest.mark.asyncio
    async def test_disconnect_should_stop_upstream_and_log_nothing(
        self,
        chat_service: ChatService,
        student_caller,
        fake_generator,
        session_factory,
    ) -> None:
        # Arrange
        student, header = student_caller
        exchange = await chat_service.prepare_exchange(chat_request(student.id, stream=True), header)
        probes = 0

        async def is_disconnected() -> bool:
            nonlocal probes
            probes += 1
            return probes > 1

        # Act
        events = [event async for event in chat_service.stream_chat(exchange, is_disconnected=is_disconnected)]

        # Assert
        assert [event.event for event in events] == [StreamEventType.TOKEN]
        assert fake_generator.yielded == 1
        assert fake_generator.closed is True
        assert await logged_messages(session_factory, student.id) == []

    @pytest.mark.asyncio
    async def test_consumer_closing_stream_should_close_upstream(
        self,
        chat_service: ChatService,
        student_caller,
        fake_generator,
        session_factory,
    ) -> None:
        # Arrange
        student, header = student_caller
        exchange = await chat_service.prepare_exchange(chat_request(student.id, stream=True), header)
        stream = chat_service.stream_chat(exchange)

        # Act
        first = await stream.__anext__()
        await stream.aclose()

        # Assert
        assert first.event is StreamEventType.TOKEN
        assert fake_generator.closed is True
        assert await logged_messages(session_factory, student.id) == []

    @pytest.mark.asyncio
    async def test_mid_stream_failure_should_end_with_error_event(
        self,
        build_service,
        make_generator,
        student_caller,
        session_factory,
    ) -> None:
        # Arrange
        student, header = student_caller
        service = build_service(generator=make_generator(stream_error=RuntimeError("connection reset")))
        exchange = await service.prepare_exchange(chat_request(student.id, stream=True), header)

        # Act
        events = [event async for event in service.stream_chat(exchange)]

        # Assert
        assert [event.event for event in events][-1] is StreamEventType.ERROR
        assert events[-1].data == {"error": "upstream_error", "detail": "Generation backend failed"}
        assert StreamEventType.COMPLETE not in [event.event for event in events]
        assert await logged_messages(session_factory, student.id) == []

    @pytest.mark.asyncio
    async def test_stalled_stream_should_time_out(
        self,
        build_service,
        make_generator,
        student_caller,
        session_factory,
    ) -> None:
        # Arrange
        class StalledGenerator(make_generator):
            async def stream(self, messages, settings):
                yield "Plants "
                await asyncio.sleep(1)
                yield "never"

        student, header = student_caller
        service = build_service(
            generator=StalledGenerator(),
            llm_settings=LLMSettings(stream_chunk_timeout_seconds=0.05),
        )
        exchange = await service.prepare_exchange(chat_request(student.id, stream=True), header)

        # Act
        events = [event async for event in service.stream_chat(exchange)]

        # Assert
        assert [event.event for event in events] == [StreamEventType.TOKEN, StreamEventType.ERROR]
        assert events[-1].data["detail"] == "Generation stream timed out"
        assert await logged_messages(session_factory, student.id) == []

    @pytest.mark.asyncio
    async def test_empty_stream_should_end_with_error_event(
        self,
        build_service,
        make_generator,
        student_caller,
    ) -> None:
        # Arrange
        student, header = student_caller
        service = build_service(generator=make_generator(tokens=[]))
        exchange = await service.prepare_exchange(chat_request(student.id, stream=True), header)

        # Act
        events = [event async for event in service.stream_chat(exchange)]

        # Assert
        assert [event.event for event in events] == [StreamEventType.ERROR]
