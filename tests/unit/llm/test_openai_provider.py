"""Unit tests for OpenAI provider.

Tests cover:
- Request building and response parsing
- Error handling and mapping
- Streamed completions
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from proposal_engine.llm.errors import (
    AuthenticationError,
    ConfigurationError,
    ContentFilterError,
    InvalidRequestError,
    ModelNotFoundError,
    ProviderError,
    RateLimitError,
    TimeoutError,
)
from proposal_engine.llm.models import ChatMessage, LLMRequest
from proposal_engine.llm.providers.openai import OpenAIProvider


class FakeAPIStatusError(Exception):
    """Fake API error for testing status mapping."""

    def __init__(self, status_code: int, message: str, response=None, request_id=None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.response = response
        self.request_id = request_id


def make_request(**kwargs) -> LLMRequest:
    return LLMRequest(
        messages=[
            ChatMessage(role="system", content="You write proposals."),
            ChatMessage(role="user", content="Hello"),
        ],
        model="gpt-4o-mini",
        **kwargs,
    )


def make_completion(text: str | None = "Hello!", finish_reason: str = "stop") -> MagicMock:
    response = MagicMock()
    response.id = "chatcmpl_123"
    response.model = "gpt-4o-mini"
    response.choices = [MagicMock()]
    response.choices[0].message.content = text
    response.choices[0].finish_reason = finish_reason
    response.usage.prompt_tokens = 12
    response.usage.completion_tokens = 8
    return response


def make_chunk(content: str | None):
    return SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=content))])


async def fake_chunk_stream(chunks):
    for chunk in chunks:
        yield chunk


class TestOpenAIProviderInit:
    """Tests for OpenAI provider initialization."""

    def test_provider_name(self):
        """Test provider name is correct."""
        assert OpenAIProvider(api_key="test-key").name == "openai"

    def test_default_model(self):
        """Test default model."""
        assert OpenAIProvider(api_key="test-key")._default_model == "gpt-4o-mini"

    def test_missing_key_raises_configuration_error(self):
        """Test client access without a key fails."""
        provider = OpenAIProvider()
        with pytest.raises(ConfigurationError) as exc_info:
            _ = provider.client
        assert "OPENAI_API_KEY" in exc_info.value.message


class TestOpenAIRequestBuilding:
    """Tests for OpenAI request building."""

    def test_system_message_kept_in_messages(self):
        """Test system messages stay in the message list."""
        provider = OpenAIProvider(api_key="test-key")
        openai_request = provider._build_request(make_request(temperature=0.7))

        assert openai_request["messages"][0] == {"role": "system", "content": "You write proposals."}
        assert openai_request["temperature"] == 0.7
        assert "max_tokens" not in openai_request

    def test_max_tokens_and_stop(self):
        """Test optional parameters pass through."""
        provider = OpenAIProvider(api_key="test-key")
        openai_request = provider._build_request(make_request(max_tokens=256, stop=["END"]))
        assert openai_request["max_tokens"] == 256
        assert openai_request["stop"] == ["END"]


class TestOpenAIResponseParsing:
    """Tests for OpenAI response parsing."""

    def test_parse_text_response(self):
        """Test parsing a completion."""
        provider = OpenAIProvider(api_key="test-key")
        response = provider._parse_response(make_completion(), latency_ms=50)

        assert response.text == "Hello!"
        assert response.provider == "openai"
        assert response.usage.total_tokens == 20
        assert response.latency_ms == 50

    def test_parse_response_without_choices(self):
        """Test a completion with no choices yields text None."""
        provider = OpenAIProvider(api_key="test-key")
        completion = make_completion()
        completion.choices = []

        response = provider._parse_response(completion, latency_ms=50)
        assert response.text is None
        assert response.finish_reason == "stop"


class TestOpenAIErrorHandling:
    """Tests for OpenAI status error translation."""

    @pytest.mark.parametrize(
        "status_code,message,expected",
        [
            (401, "Invalid API key", AuthenticationError),
            (403, "Forbidden", AuthenticationError),
            (404, "The model does not exist", ModelNotFoundError),
            (408, "Timeout", TimeoutError),
            (400, "Bad parameter", InvalidRequestError),
            (400, "Flagged by content_filter", ContentFilterError),
            (502, "Bad gateway", ProviderError),
        ],
    )
    def test_status_mapping(self, status_code, message, expected):
        """Test each status maps to the expected error class."""
        provider = OpenAIProvider(api_key="test-key")
        translated = provider._translate_status_error(
            FakeAPIStatusError(status_code=status_code, message=message)
        )
        assert type(translated) is expected
        assert translated.provider == "openai"

    def test_rate_limit_without_header(self):
        """Test 429 without retry-after leaves it unset."""
        provider = OpenAIProvider(api_key="test-key")
        translated = provider._translate_status_error(
            FakeAPIStatusError(status_code=429, message="Slow down")
        )
        assert isinstance(translated, RateLimitError)
        assert translated.retry_after is None


class TestOpenAIGenerate:
    """Tests for generate and stream against a mocked SDK client."""

    @pytest.mark.asyncio
    async def test_generate(self):
        """Test generate calls chat.completions.create."""
        provider = OpenAIProvider(api_key="test-key")
        mock_client = MagicMock()
        mock_client.chat.completions.create = AsyncMock(return_value=make_completion("{}"))
        provider._client = mock_client

        response = await provider.generate(make_request())

        assert response.text == "{}"
        assert "stream" not in mock_client.chat.completions.create.call_args.kwargs

    @pytest.mark.asyncio
    async def test_stream_yields_deltas(self):
        """Test stream requests stream=True and skips empty deltas."""
        provider = OpenAIProvider(api_key="test-key")
        mock_client = MagicMock()
        mock_client.chat.completions.create = AsyncMock(
            return_value=fake_chunk_stream([
                make_chunk("Hel"),
                make_chunk(None),
                SimpleNamespace(choices=[]),
                make_chunk("lo"),
            ])
        )
        provider._client = mock_client

        chunks = [text async for text in provider.stream(make_request())]

        assert chunks == ["Hel", "lo"]
        assert mock_client.chat.completions.create.call_args.kwargs["stream"] is True
