"""Provider construction from configuration."""

import logging

from ..config import GenerationConfig
from .providers.anthropic import AnthropicProvider
from .providers.base import LLMProvider
from .providers.openai import OpenAIProvider

logger = logging.getLogger(__name__)

_PROVIDERS: dict[str, type[AnthropicProvider] | type[OpenAIProvider]] = {
    "anthropic": AnthropicProvider,
    "openai": OpenAIProvider,
}


def available_providers() -> list[str]:
    """Names accepted by ``create_provider``."""
    return list(_PROVIDERS)


def create_provider(config: GenerationConfig) -> LLMProvider:
    """Build the provider named by ``config.provider``.

    The API key is not checked here; a missing key surfaces as a
    ConfigurationError on the first call, before any network traffic.

    Raises:
        ValueError: If the provider name is not recognized.
    """
    provider_cls = _PROVIDERS.get(config.provider)
    if provider_cls is None:
        raise ValueError(
            f"Unknown provider: {config.provider}. Available: {available_providers()}"
        )

    if not config.has_api_key:
        logger.warning(
            "No API key configured for provider %s",
            config.provider,
            extra={"provider": config.provider},
        )

    return provider_cls(
        api_key=config.api_key,
        timeout=config.timeout_seconds,
        default_model=config.model,
    )
