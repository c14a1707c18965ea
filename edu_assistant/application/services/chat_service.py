"""
Chat service for student Q&A with optional retrieval grounding.

Orchestrates the full request pipeline:
validate -> authenticate -> rate check -> sanitize -> resolve student,
activity and prompt settings -> load history -> [retrieve] -> generate
(batch or streamed) -> log both turns -> respond.

Any stage can short-circuit with an exception from edu_assistant.core.exceptions;
the API layer maps those to status codes. Logging failures never fail a
response that was already generated.

Dependencies: edu_assistant.application, edu_assistant.boundary, edu_assistant.core
System role: Chat service orchestration layer
"""

import asyncio
import logging
from collections.abc import AsyncGenerator, AsyncIterator, Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol
from uuid import UUID

from langchain_core.messages import BaseMessage
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from edu_assistant.application.adapters.chat_history_adapter import ChatHistoryAdapter
from edu_assistant.application.services.identity_service import IdentityService
from edu_assistant.application.services.retrieval_service import RetrievalService
from edu_assistant.boundary.db.CRUD.activity_crud import activity_crud
from edu_assistant.boundary.db.CRUD.class_prompt_settings_crud import class_prompt_settings_crud
from edu_assistant.boundary.db.CRUD.question_frequency_crud import question_frequency_crud
from edu_assistant.boundary.db.CRUD.student_crud import student_crud, student_session_crud
from edu_assistant.boundary.llm.chat_model import GenerationResult
from edu_assistant.configs.llm import LLMSettings
from edu_assistant.configs.retrieval import RetrievalSettings
from edu_assistant.core.exceptions import (
    AuthorizationError,
    EduAssistantError,
    NotFoundError,
    PersistenceError,
    UpstreamError,
    ValidationError,
)
from edu_assistant.core.prompt import PromptSettings, build_messages, build_system_prompt
from edu_assistant.core.rate_limiter import RateLimiter
from edu_assistant.core.sanitizer import sanitize_text
from edu_assistant.models.chat import ChatRequest, ChatResponse, ValidatedChatRequest
from edu_assistant.models.identity import Identity
from edu_assistant.models.retrieval import SearchResult
from edu_assistant.models.streaming import StreamEvent, StreamEventType

logger = logging.getLogger(__name__)

DisconnectProbe = Callable[[], Awaitable[bool]]


class ChatStage(str, Enum):
    """Pipeline stages, logged on every transition."""

    RECEIVED = "received"
    AUTHENTICATED = "authenticated"
    RATE_CHECKED = "rate_checked"
    SANITIZED = "sanitized"
    RETRIEVED = "retrieved"
    GENERATED = "generated"
    LOGGED = "logged"
    RESPONDED = "responded"
    FAILED = "failed"


class GenerationBackend(Protocol):
    def supports(self, model: str) -> bool: ...

    async def generate(
        self, messages: Sequence[BaseMessage], settings: PromptSettings
    ) -> GenerationResult: ...

    def stream(
        self, messages: Sequence[BaseMessage], settings: PromptSettings
    ) -> AsyncIterator[str]: ...


@dataclass(frozen=True)
class PreparedExchange:
    """Everything needed to generate and log one answer."""

    request: ValidatedChatRequest
    identity: Identity
    prompt_settings: PromptSettings
    messages: list[BaseMessage]
    references: list[SearchResult] = field(default_factory=list)

    @property
    def rag_used(self) -> bool:
        return bool(self.references)


@dataclass(frozen=True)
class ChatResult:
    response: str
    tokens_used: int
    model: str
    rag_used: bool

    def to_response(self) -> ChatResponse:
        return ChatResponse(
            response=self.response,
            tokens_used=self.tokens_used,
            model=self.model,
            rag_used=self.rag_used,
        )


def validate_chat_request(request: ChatRequest) -> ValidatedChatRequest:
    """
    Check required fields without touching any backend.

    Raises:
        ValidationError: message or studentId missing, or ids malformed
    """
    if not request.message or not request.message.strip() or not request.student_id:
        raise ValidationError("Message and studentId are required")

    try:
        student_id = UUID(request.student_id)
    except ValueError as e:
        raise ValidationError("studentId must be a valid UUID", field="studentId") from e

    activity_id = None
    if request.activity_id:
        try:
            activity_id = UUID(request.activity_id)
        except ValueError as e:
            raise ValidationError("activityId must be a valid UUID", field="activityId") from e

    return ValidatedChatRequest(
        message=request.message,
        student_id=student_id,
        activity_id=activity_id,
        stream=request.stream,
        use_rag=request.use_rag,
    )


class ChatService:
    """
    Chat service for student Q&A.

    Coordinates identity, rate limiting, sanitization, prompt resolution,
    retrieval, generation and the chat log for single-turn requests that
    carry multi-turn history.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        identity_service: IdentityService,
        rate_limiter: RateLimiter,
        generator: GenerationBackend,
        retrieval_service: RetrievalService | None = None,
        llm_settings: LLMSettings | None = None,
        retrieval_settings: RetrievalSettings | None = None,
    ) -> None:
        """
        Initialize chat service.

        Args:
            session_factory: Factory for database sessions
            identity_service: Identity gate
            rate_limiter: Per-identity admission control
            generator: Generation backend
            retrieval_service: Hybrid retriever (None disables retrieval)
            llm_settings: Generation defaults
            retrieval_settings: Retrieval parameters and failure policy
        """
        self._session_factory = session_factory
        self._identity = identity_service
        self._rate_limiter = rate_limiter
        self._generator = generator
        self._retrieval = retrieval_service
        self._llm = llm_settings or LLMSettings()
        self._retrieval_settings = retrieval_settings or RetrievalSettings()

    def _transition(self, stage: ChatStage, **context) -> None:
        logger.info(f"{__name__}:stage - {stage.value}", extra={"stage": stage.value, **context})

    async def prepare_exchange(
        self,
        request: ChatRequest,
        authorization: str | None,
    ) -> PreparedExchange:
        """
        Run every stage up to (not including) generation.

        Flow:
        1. Validate required fields (no backend contact)
        2. Authenticate caller
        3. Rate check on the caller identity
        4. Sanitize the message
        5. Resolve student (404) and check the caller may act for it (403)
        6. Resolve activity (unknown ids fall back to defaults) and class prompt settings
        7. Load recent history
        8. Retrieve references when requested
        9. Build the prompt

        Raises:
            ValidationError, AuthenticationError, AuthorizationError,
            NotFoundError, RateLimitError, UpstreamError
        """
        try:
            return await self._prepare(request, authorization)
        except EduAssistantError as e:
            self._transition(ChatStage.FAILED, error_code=e.error_code)
            raise

    async def _prepare(self, request: ChatRequest, authorization: str | None) -> PreparedExchange:
        self._transition(ChatStage.RECEIVED, stream=request.stream, use_rag=request.use_rag)
        validated = validate_chat_request(request)

        identity = await self._identity.authenticate(authorization)
        self._transition(ChatStage.AUTHENTICATED, user_id=str(identity.user_id))

        await self._rate_limiter.enforce(str(identity.user_id))
        self._transition(ChatStage.RATE_CHECKED)

        message = sanitize_text(validated.message)
        if not message:
            raise ValidationError("Message is empty after sanitization", field="message")
        validated = validated.model_copy(update={"message": message})
        self._transition(ChatStage.SANITIZED, message_len=len(message))

        async with self._session_factory() as db:
            student = await student_crud.get_by_id(db, validated.student_id)
            if student is None:
                raise NotFoundError("Student", str(validated.student_id))
            if not identity.is_admin and student.user_id != identity.user_id:
                raise AuthorizationError("Not allowed to chat on behalf of this student")

            activity = None
            if validated.activity_id is not None:
                activity = await activity_crud.get_by_id(db, validated.activity_id)
                if activity is None:
                    # Unknown activity: answer with default settings, log without the reference
                    logger.warning(
                        f"{__name__}:_prepare - Activity not found, continuing without it",
                        extra={"activity_id": str(validated.activity_id)},
                    )
                    validated = validated.model_copy(update={"activity_id": None})

            prompt_settings = await self._resolve_prompt_settings(
                db,
                class_name=student.class_name,
                activity_type=activity.type if activity else None,
            )
            student_name = student.name
            activity_title = activity.title if activity else None

        if not self._generator.supports(prompt_settings.model):
            raise UpstreamError(f"Unsupported AI model: {prompt_settings.model}", operation="generate")

        history = await self._load_history(validated)
        references = await self._retrieve(validated) if validated.use_rag else []

        system_prompt = build_system_prompt(
            prompt_settings.template,
            student_name=student_name,
            activity_title=activity_title,
            question=message,
            references=[reference.content for reference in references],
        )
        messages = build_messages(
            system_prompt,
            history,
            message,
            history_limit=self._llm.history_messages,
        )

        return PreparedExchange(
            request=validated,
            identity=identity,
            prompt_settings=prompt_settings,
            messages=messages,
            references=references,
        )

    async def _resolve_prompt_settings(
        self,
        db: AsyncSession,
        class_name: str | None,
        activity_type: str | None,
    ) -> PromptSettings:
        defaults = PromptSettings(
            model=self._llm.default_model,
            temperature=self._llm.temperature,
            max_tokens=self._llm.max_tokens,
            template=self._llm.prompt_template,
        )
        if not class_name or not activity_type:
            return defaults

        row = await class_prompt_settings_crud.get_for(db, class_name, activity_type)
        if row is None:
            return defaults

        return PromptSettings(
            model=row.ai_model or defaults.model,
            temperature=row.temperature if row.temperature is not None else defaults.temperature,
            max_tokens=row.max_tokens or defaults.max_tokens,
            template=row.prompt_template or defaults.template,
        )

    async def _load_history(self, request: ValidatedChatRequest) -> list[BaseMessage]:
        adapter = ChatHistoryAdapter(self._session_factory, request.student_id, request.activity_id)
        try:
            return await adapter.get_recent_messages(limit=self._llm.history_messages)
        except SQLAlchemyError as e:
            logger.warning(f"{__name__}:_load_history - History unavailable, continuing without it: {type(e).__name__}")
            return []

    async def _retrieve(self, request: ValidatedChatRequest) -> list[SearchResult]:
        if self._retrieval is None:
            logger.warning(f"{__name__}:_retrieve - Retrieval requested but not configured")
            return []

        try:
            result = await self._retrieval.search(
                request.message,
                match_threshold=self._retrieval_settings.chat_match_threshold,
                match_count=self._retrieval_settings.chat_match_count,
            )
        except UpstreamError:
            if self._retrieval_settings.on_retrieval_failure == "abort":
                raise
            logger.warning(f"{__name__}:_retrieve - Retrieval failed, answering without references")
            return []

        self._transition(ChatStage.RETRIEVED, references=len(result.results))
        return result.results

    async def complete(self, exchange: PreparedExchange) -> ChatResult:
        """
        Generate a batch answer and log the exchange.

        Raises:
            UpstreamError: Generation failed (nothing is logged)
        """
        try:
            generation = await self._generator.generate(exchange.messages, exchange.prompt_settings)
        except EduAssistantError as e:
            self._transition(ChatStage.FAILED, error_code=e.error_code)
            raise
        self._transition(ChatStage.GENERATED, tokens_used=generation.tokens_used)

        await self._log_exchange(exchange, generation.text, generation.model, generation.tokens_used)

        self._transition(ChatStage.RESPONDED)
        return ChatResult(
            response=generation.text,
            tokens_used=generation.tokens_used,
            model=generation.model,
            rag_used=exchange.rag_used,
        )

    async def process_chat(self, request: ChatRequest, authorization: str | None) -> ChatResult:
        """
        Batch chat: prepare, generate, log, respond.

        Args:
            request: Wire request
            authorization: Raw Authorization header

        Returns:
            ChatResult: Answer text with token usage, model and retrieval flag
        """
        exchange = await self.prepare_exchange(request, authorization)
        return await self.complete(exchange)

    async def stream_chat(
        self,
        exchange: PreparedExchange,
        is_disconnected: DisconnectProbe | None = None,
    ) -> AsyncGenerator[StreamEvent, None]:
        """
        Stream an answer for a prepared exchange.

        Event order: optional CONTEXT, TOKEN events in arrival order, then
        exactly one terminal event (COMPLETE on success, ERROR on upstream
        failure). Both turns are logged only after the upstream stream ends
        successfully. When the client disconnects the upstream stream is
        closed and nothing is logged.

        Args:
            exchange: Output of prepare_exchange
            is_disconnected: Async probe returning True once the client is gone

        Yields:
            StreamEvent: context, token, complete or error events
        """
        if exchange.rag_used:
            yield StreamEvent(
                event=StreamEventType.CONTEXT,
                data={
                    "chunks": [
                        {
                            "id": reference.id,
                            "documentName": reference.document_name,
                            "contentSnippet": reference.content[:200],
                            "score": reference.score,
                            "searchType": reference.origin.value,
                        }
                        for reference in exchange.references
                    ]
                },
            )

        tokens: list[str] = []
        upstream = self._generator.stream(exchange.messages, exchange.prompt_settings)
        iterator = upstream.__aiter__()
        timeout = self._llm.stream_chunk_timeout_seconds

        try:
            while True:
                if is_disconnected is not None and await is_disconnected():
                    logger.info(
                        f"{__name__}:stream_chat - Client disconnected, stopping upstream",
                        extra={"tokens_streamed": len(tokens)},
                    )
                    return

                try:
                    token = await asyncio.wait_for(iterator.__anext__(), timeout=timeout)
                except StopAsyncIteration:
                    break
                except asyncio.TimeoutError:
                    logger.error(f"{__name__}:stream_chat - No chunk within {timeout}s")
                    self._transition(ChatStage.FAILED, error_code=UpstreamError.error_code)
                    yield self._error_event(UpstreamError("Generation stream timed out", operation="generate"))
                    return
                except EduAssistantError as e:
                    self._transition(ChatStage.FAILED, error_code=e.error_code)
                    yield self._error_event(e)
                    return
                except Exception as e:
                    logger.error(f"{__name__}:stream_chat - Upstream stream failed: {type(e).__name__}: {e}")
                    self._transition(ChatStage.FAILED, error_code=UpstreamError.error_code)
                    yield self._error_event(UpstreamError("Generation backend failed", operation="generate"))
                    return

                yield StreamEvent(
                    event=StreamEventType.TOKEN,
                    data={"token": token, "index": len(tokens)},
                )
                tokens.append(token)
        finally:
            aclose = getattr(iterator, "aclose", None)
            if aclose is not None:
                await aclose()

        full_answer = "".join(tokens).strip()
        if not full_answer:
            self._transition(ChatStage.FAILED, error_code=UpstreamError.error_code)
            yield self._error_event(UpstreamError("Generation backend returned an empty response"))
            return
        self._transition(ChatStage.GENERATED, tokens_streamed=len(tokens))

        await self._log_exchange(exchange, full_answer, exchange.prompt_settings.model, None)

        self._transition(ChatStage.RESPONDED)
        yield StreamEvent(
            event=StreamEventType.COMPLETE,
            data={
                "full_answer": full_answer,
                "model": exchange.prompt_settings.model,
                "ragUsed": exchange.rag_used,
            },
        )

    @staticmethod
    def _error_event(error: EduAssistantError) -> StreamEvent:
        return StreamEvent(
            event=StreamEventType.ERROR,
            data={"error": error.error_code, "detail": error.message},
        )

    async def _log_exchange(
        self,
        exchange: PreparedExchange,
        answer: str,
        model: str,
        tokens_used: int | None,
    ) -> None:
        """
        Append the user turn, then the assistant turn.

        The assistant turn is skipped when the user turn could not be stored,
        so no assistant message is ever logged without its question.
        """
        request = exchange.request
        adapter = ChatHistoryAdapter(self._session_factory, request.student_id, request.activity_id)

        try:
            await adapter.add_user_message(request.message)
            await adapter.add_ai_message(answer, model_used=model, tokens_used=tokens_used)
            self._transition(ChatStage.LOGGED)
        except PersistenceError as e:
            logger.error(f"{__name__}:_log_exchange - Chat log incomplete: {e}")

        await self._record_activity(request)

    async def _record_activity(self, request: ValidatedChatRequest) -> None:
        """Best-effort question frequency and online-status bookkeeping."""
        async with self._session_factory() as db:
            try:
                await question_frequency_crud.track(db, request.student_id, request.message)
                await student_session_crud.touch(db, request.student_id)
                await db.commit()
            except SQLAlchemyError as e:
                await db.rollback()
                logger.warning(f"{__name__}:_record_activity - Skipped activity tracking: {type(e).__name__}")
