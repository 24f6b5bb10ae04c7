"""Anthropic Messages API provider, with text streaming."""

import time
from collections.abc import AsyncIterator
from typing import Any

from anthropic import (
    AsyncAnthropic,
    APIConnectionError,
    APIStatusError,
    APITimeoutError,
)

from ..errors import ConfigurationError, LLMError, ProviderError, TimeoutError
from ..models import LLMRequest, LLMResponse, Usage
from .base import LLMProvider, status_error

DEFAULT_MODEL = "claude-haiku-4-5-20251001"
DEFAULT_MAX_TOKENS = 4096

_FINISH_REASONS = {
    "end_turn": "stop",
    "stop_sequence": "stop",
    "max_tokens": "length",
}

_SDK_ERRORS = (APITimeoutError, APIConnectionError, APIStatusError)


class AnthropicProvider(LLMProvider):
    """Anthropic Messages API provider."""

    SUPPORTED_FEATURES = {"streaming", "system_message"}

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float = 60.0,
        default_model: str = DEFAULT_MODEL,
    ):
        """Initialize Anthropic provider.

        Args:
            api_key: Anthropic API key. A missing key fails on first use.
            timeout: Request timeout in seconds.
            default_model: Model used when the request does not name one.
        """
        self._api_key = api_key
        self._timeout = timeout
        self._default_model = default_model
        self._client: AsyncAnthropic | None = None

    @property
    def name(self) -> str:
        return "anthropic"

    @property
    def client(self) -> AsyncAnthropic:
        """SDK client, created on first use.

        Raises:
            ConfigurationError: If no API key is configured.
        """
        if self._client is None:
            if not self._api_key:
                raise ConfigurationError(
                    "ANTHROPIC_API_KEY environment variable is not set",
                    provider=self.name,
                )
            self._client = AsyncAnthropic(api_key=self._api_key, timeout=self._timeout)
        return self._client

    def supports(self, feature: str) -> bool:
        return feature in self.SUPPORTED_FEATURES

    async def generate(self, request: LLMRequest) -> LLMResponse:
        client = self.client
        params = self._build_request(request)
        started = time.perf_counter()

        try:
            message = await client.messages.create(**params)
        except _SDK_ERRORS as e:
            raise self._translate_error(e) from e

        return self._parse_response(message, int((time.perf_counter() - started) * 1000))

    async def stream(self, request: LLMRequest) -> AsyncIterator[str]:
        client = self.client
        params = self._build_request(request)

        try:
            async with client.messages.stream(**params) as stream:
                async for text in stream.text_stream:
                    if text:
                        yield text
        except _SDK_ERRORS as e:
            raise self._translate_error(e) from e

    def _build_request(self, request: LLMRequest) -> dict[str, Any]:
        """Convert LLMRequest to Messages API parameters."""
        params: dict[str, Any] = {
            "model": request.model or self._default_model,
            # System content goes in the top-level "system" parameter
            "messages": [
                {"role": m.role, "content": m.content}
                for m in request.messages
                if m.role != "system"
            ],
            "max_tokens": request.max_tokens or DEFAULT_MAX_TOKENS,
            # Anthropic accepts 0-1
            "temperature": min(request.temperature, 1.0),
        }
        if request.system_prompt:
            params["system"] = request.system_prompt
        if request.stop:
            params["stop_sequences"] = request.stop
        return params

    def _parse_response(self, message: Any, latency_ms: int) -> LLMResponse:
        texts = [block.text for block in message.content if getattr(block, "type", None) == "text"]
        stop_reason = message.stop_reason or "end_turn"
        input_tokens = getattr(message.usage, "input_tokens", 0) or 0
        output_tokens = getattr(message.usage, "output_tokens", 0) or 0

        return LLMResponse(
            text="".join(texts) if texts else None,
            finish_reason=_FINISH_REASONS.get(stop_reason, stop_reason),
            usage=Usage(
                prompt_tokens=input_tokens,
                completion_tokens=output_tokens,
                total_tokens=input_tokens + output_tokens,
            ),
            model=message.model,
            provider=self.name,
            latency_ms=latency_ms,
            request_id=message.id,
        )

    def _translate_error(self, error: Exception) -> LLMError:
        # APITimeoutError subclasses APIConnectionError
        if isinstance(error, APITimeoutError):
            return TimeoutError(
                f"Anthropic request timed out after {self._timeout}s", provider=self.name
            )
        if isinstance(error, APIConnectionError):
            return ProviderError(f"Failed to connect to Anthropic: {error}", provider=self.name)
        return self._translate_status_error(error)

    def _translate_status_error(self, error: Any) -> LLMError:
        return status_error(
            error,
            provider=self.name,
            vendor="Anthropic",
            filter_markers=("safety", "harmful"),
        )
