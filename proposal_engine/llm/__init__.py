"""LLM provider abstraction layer.

This module provides a vendor-neutral interface for calling the text
completion providers (Anthropic, OpenAI) plus the exponential-backoff
retry helper used by the proposal pipeline.
"""

from .client import available_providers, create_provider
from .errors import (
    AuthenticationError,
    ConfigurationError,
    ContentFilterError,
    InvalidRequestError,
    LLMError,
    ModelNotFoundError,
    OverloadedError,
    ProviderError,
    RateLimitError,
    TimeoutError,
)
from .models import ChatMessage, LLMRequest, LLMResponse, Usage
from .providers import AnthropicProvider, LLMProvider, OpenAIProvider
from .retry import backoff_delay, is_retryable, with_retry

__all__ = [
    "create_provider",
    "available_providers",
    "LLMProvider",
    "AnthropicProvider",
    "OpenAIProvider",
    "LLMRequest",
    "LLMResponse",
    "ChatMessage",
    "Usage",
    "LLMError",
    "ConfigurationError",
    "AuthenticationError",
    "RateLimitError",
    "OverloadedError",
    "TimeoutError",
    "InvalidRequestError",
    "ContentFilterError",
    "ModelNotFoundError",
    "ProviderError",
    "with_retry",
    "backoff_delay",
    "is_retryable",
]
