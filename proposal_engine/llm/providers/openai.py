"""OpenAI Chat Completions provider, with streamed completions."""

import time
from collections.abc import AsyncIterator
from typing import Any

from openai import AsyncOpenAI, APIConnectionError, APIStatusError, APITimeoutError

from ..errors import ConfigurationError, LLMError, ProviderError, TimeoutError
from ..models import LLMRequest, LLMResponse, Usage
from .base import LLMProvider, status_error

DEFAULT_MODEL = "gpt-4o-mini"

_SDK_ERRORS = (APITimeoutError, APIConnectionError, APIStatusError)


class OpenAIProvider(LLMProvider):
    """OpenAI Chat Completions API provider."""

    SUPPORTED_FEATURES = {"streaming", "system_message", "json_object"}

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float = 60.0,
        default_model: str = DEFAULT_MODEL,
    ):
        self._api_key = api_key
        self._timeout = timeout
        self._default_model = default_model
        self._client: AsyncOpenAI | None = None

    @property
    def name(self) -> str:
        return "openai"

    @property
    def client(self) -> AsyncOpenAI:
        """SDK client, created on first use.

        Raises:
            ConfigurationError: If no API key is configured.
        """
        if self._client is None:
            if not self._api_key:
                raise ConfigurationError(
                    "OPENAI_API_KEY environment variable is not set",
                    provider=self.name,
                )
            self._client = AsyncOpenAI(api_key=self._api_key, timeout=self._timeout)
        return self._client

    def supports(self, feature: str) -> bool:
        return feature in self.SUPPORTED_FEATURES

    async def generate(self, request: LLMRequest) -> LLMResponse:
        client = self.client
        params = self._build_request(request)
        started = time.perf_counter()

        try:
            completion = await client.chat.completions.create(**params)
        except _SDK_ERRORS as e:
            raise self._translate_error(e) from e

        return self._parse_response(completion, int((time.perf_counter() - started) * 1000))

    async def stream(self, request: LLMRequest) -> AsyncIterator[str]:
        client = self.client
        params = {**self._build_request(request), "stream": True}

        try:
            chunks = await client.chat.completions.create(**params)
            async for chunk in chunks:
                # Usage-only chunks have no choices
                if chunk.choices and chunk.choices[0].delta.content:
                    yield chunk.choices[0].delta.content
        except _SDK_ERRORS as e:
            raise self._translate_error(e) from e

    def _build_request(self, request: LLMRequest) -> dict[str, Any]:
        """Convert LLMRequest to Chat Completions parameters."""
        params: dict[str, Any] = {
            "model": request.model or self._default_model,
            "messages": [{"role": m.role, "content": m.content} for m in request.messages],
            "temperature": request.temperature,
        }
        if request.max_tokens:
            params["max_tokens"] = request.max_tokens
        if request.stop:
            params["stop"] = request.stop
        return params

    def _parse_response(self, completion: Any, latency_ms: int) -> LLMResponse:
        choice = completion.choices[0] if completion.choices else None
        prompt_tokens = getattr(completion.usage, "prompt_tokens", 0) or 0
        completion_tokens = getattr(completion.usage, "completion_tokens", 0) or 0

        return LLMResponse(
            text=choice.message.content if choice else None,
            finish_reason=(choice.finish_reason if choice else None) or "stop",
            usage=Usage(
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=prompt_tokens + completion_tokens,
            ),
            model=completion.model,
            provider=self.name,
            latency_ms=latency_ms,
            request_id=completion.id,
        )

    def _translate_error(self, error: Exception) -> LLMError:
        if isinstance(error, APITimeoutError):
            return TimeoutError(f"OpenAI request timed out after {self._timeout}s", provider=self.name)
        if isinstance(error, APIConnectionError):
            return ProviderError(f"Failed to connect to OpenAI: {error}", provider=self.name)
        return self._translate_status_error(error)

    def _translate_status_error(self, error: Any) -> LLMError:
        return status_error(
            error,
            provider=self.name,
            vendor="OpenAI",
            filter_markers=("content_filter", "safety"),
        )
