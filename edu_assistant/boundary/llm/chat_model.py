"""
Generation backend.

Builds Gemini chat models per resolved prompt settings and exposes batch
and streaming generation with explicit timeout and retry policy. Only
Gemini model names are supported; anything else is rejected up front.

Dependencies: langchain_google_genai, langchain_core, tenacity
System role: LLM boundary for the chat orchestrator
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Sequence
from dataclasses import dataclass

from dotenv import load_dotenv
from langchain_core.messages import BaseMessage
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential_jitter

from edu_assistant.core.exceptions import UpstreamError
from edu_assistant.core.prompt import PromptSettings, content_to_text

load_dotenv()
logger = logging.getLogger(__name__)

SUPPORTED_MODEL_PREFIXES = ("gemini",)


@dataclass(frozen=True)
class GenerationResult:
    text: str
    tokens_used: int
    model: str


class GeminiGenerationBackend:
    """
    Gemini chat generation through LangChain.

    Models are cached per (model, temperature, max_tokens) so repeated
    requests from one class reuse the same client.
    """

    def __init__(
        self,
        google_api_key: str | None = None,
        timeout_seconds: float = 60.0,
        max_attempts: int = 1,
    ) -> None:
        """
        Args:
            google_api_key: API key (None lets the client read GOOGLE_API_KEY)
            timeout_seconds: Timeout for one batch generation attempt
            max_attempts: Total batch attempts (1 means no retry)
        """
        self._google_api_key = google_api_key
        self.timeout_seconds = timeout_seconds
        self.max_attempts = max_attempts
        self._models: dict[tuple[str, float, int], object] = {}

    @staticmethod
    def supports(model: str) -> bool:
        return model.lower().startswith(SUPPORTED_MODEL_PREFIXES)

    def _get_model(self, settings: PromptSettings):
        if not self.supports(settings.model):
            raise UpstreamError(
                f"Unsupported AI model: {settings.model}",
                operation="generate",
            )

        key = (settings.model, settings.temperature, settings.max_tokens)
        model = self._models.get(key)
        if model is None:
            from langchain_google_genai import ChatGoogleGenerativeAI

            kwargs = {"google_api_key": self._google_api_key} if self._google_api_key else {}
            model = ChatGoogleGenerativeAI(
                model=settings.model,
                temperature=settings.temperature,
                max_output_tokens=settings.max_tokens,
                **kwargs,
            )
            self._models[key] = model
            logger.info(f"{__name__}:_get_model - Created chat model {settings.model}")
        return model

    async def generate(
        self,
        messages: Sequence[BaseMessage],
        settings: PromptSettings,
    ) -> GenerationResult:
        """
        Generate a complete answer.

        Raises:
            UpstreamError: Unsupported model, provider failure, timeout or empty answer
        """
        model = self._get_model(settings)

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.max_attempts),
                wait=wait_exponential_jitter(initial=1, max=10, jitter=1),
                before_sleep=lambda retry_state: logger.warning(
                    f"{__name__}:generate - Retry {retry_state.attempt_number}/{self.max_attempts}"
                ),
                reraise=True,
            ):
                with attempt:
                    response = await asyncio.wait_for(
                        model.ainvoke(list(messages)),
                        timeout=self.timeout_seconds,
                    )
        except asyncio.TimeoutError as e:
            logger.error(f"{__name__}:generate - Timed out after {self.timeout_seconds}s")
            raise UpstreamError("Generation request timed out", operation="generate") from e
        except Exception as e:
            logger.error(f"{__name__}:generate - {type(e).__name__}: {e}")
            raise UpstreamError("Generation backend failed", operation="generate") from e

        text = content_to_text(response.content).strip()
        if not text:
            raise UpstreamError("Generation backend returned an empty response", operation="generate")

        usage = getattr(response, "usage_metadata", None) or {}
        return GenerationResult(
            text=text,
            tokens_used=int(usage.get("total_tokens", 0) or 0),
            model=settings.model,
        )

    async def stream(
        self,
        messages: Sequence[BaseMessage],
        settings: PromptSettings,
    ) -> AsyncIterator[str]:
        """
        Stream answer text chunks in arrival order.

        Streams are never retried: a partial answer may already have reached
        the client. The caller bounds the wait for each chunk.
        """
        model = self._get_model(settings)
        async for chunk in model.astream(list(messages)):
            token = content_to_text(chunk.content)
            if token:
                yield token
