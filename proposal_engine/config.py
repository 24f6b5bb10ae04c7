"""Configuration for proposal content generation.

Settings are resolved once (usually from the process environment) into an
immutable ``GenerationConfig`` that is passed explicitly to the generator
and threaded through every call.

Environment variables:
- PROPOSAL_AI_PROVIDER: "anthropic" (default) or "openai"
- ANTHROPIC_API_KEY / OPENAI_API_KEY: API key for the selected provider
- PROPOSAL_AI_MODEL: Model identifier (default depends on provider)
- PROPOSAL_AI_MAX_TOKENS: Output token cap (default: 4096)
- PROPOSAL_AI_TEMPERATURE: Sampling temperature (default: 0.7)
- PROPOSAL_AI_TIMEOUT_SECONDS: Request timeout (default: 60)
- PROPOSAL_AI_MAX_RETRIES: Retries after the first attempt (default: 2)
- PROPOSAL_AI_RETRY_DELAY_SECONDS: Initial backoff delay (default: 1.0)
- PROPOSAL_AI_MAX_CONCURRENCY: Per-section fan-out limit (default: 3)
"""

import os
from collections.abc import Mapping
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

ProviderName = Literal["anthropic", "openai"]

DEFAULT_MODELS: dict[str, str] = {
    "anthropic": "claude-haiku-4-5-20251001",
    "openai": "gpt-4o-mini",
}

API_KEY_ENV_VARS: dict[str, str] = {
    "anthropic": "ANTHROPIC_API_KEY",
    "openai": "OPENAI_API_KEY",
}

# env var -> config field
_ENV_FIELDS = {
    "PROPOSAL_AI_MODEL": "model",
    "PROPOSAL_AI_MAX_TOKENS": "max_tokens",
    "PROPOSAL_AI_TEMPERATURE": "temperature",
    "PROPOSAL_AI_TIMEOUT_SECONDS": "timeout_seconds",
    "PROPOSAL_AI_MAX_RETRIES": "max_retries",
    "PROPOSAL_AI_RETRY_DELAY_SECONDS": "retry_initial_delay",
    "PROPOSAL_AI_MAX_CONCURRENCY": "max_concurrency",
}


class GenerationConfig(BaseModel):
    """Immutable settings for the proposal generation pipeline."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    provider: ProviderName = "anthropic"
    api_key: str | None = Field(default=None, repr=False)
    model: str = Field(default="", description="Defaults to the provider's model")
    max_tokens: int = Field(default=4096, gt=0)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    timeout_seconds: float = Field(default=60.0, gt=0)
    max_retries: int = Field(default=2, ge=0)
    retry_initial_delay: float = Field(default=1.0, ge=0)
    max_concurrency: int = Field(default=3, ge=1)

    @model_validator(mode="before")
    @classmethod
    def _default_model_for_provider(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("model"):
            provider = data.get("provider") or "anthropic"
            data = {**data, "model": DEFAULT_MODELS.get(provider, DEFAULT_MODELS["anthropic"])}
        return data

    @property
    def has_api_key(self) -> bool:
        """True if an API key is configured for the selected provider."""
        return bool(self.api_key)

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        **overrides: Any,
    ) -> "GenerationConfig":
        """Build a config from environment variables.

        Args:
            environ: Mapping to read instead of ``os.environ``.
            **overrides: Explicit values that win over the environment.

        Returns:
            A validated, frozen GenerationConfig.
        """
        env = os.environ if environ is None else environ

        values: dict[str, Any] = {
            "provider": env.get("PROPOSAL_AI_PROVIDER", "anthropic").strip().lower(),
        }
        for env_name, field_name in _ENV_FIELDS.items():
            raw = env.get(env_name)
            if raw is not None and raw.strip():
                values[field_name] = raw.strip()

        values.update(overrides)

        if "api_key" not in values:
            key_var = API_KEY_ENV_VARS.get(values["provider"])
            if key_var:
                values["api_key"] = env.get(key_var) or None

        return cls(**values)
