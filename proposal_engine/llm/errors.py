"""Provider-level error hierarchy.

Raised by the provider adapters. Each class declares whether the failure
is transient through a class-level ``retryable`` flag, which the retry loop
reads directly. ``services.ai_errors.classify`` maps these classes onto
pipeline error codes.
"""


class LLMError(Exception):
    """Base exception for provider calls."""

    retryable: bool = False

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        request_id: str | None = None,
        correlation_id: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.request_id = request_id
        self.correlation_id = correlation_id

    def __str__(self) -> str:
        context = [
            f"{key}={value}"
            for key, value in (("provider", self.provider), ("request_id", self.request_id))
            if value
        ]
        return " ".join([self.message, *context])


class ConfigurationError(LLMError):
    """No API key configured; raised before any network call."""


class AuthenticationError(LLMError):
    """401/403: key rejected or access denied."""


class RateLimitError(LLMError):
    """429: too many requests. ``retry_after`` is in seconds, if sent."""

    retryable = True

    def __init__(
        self,
        message: str,
        retry_after: float | None = None,
        provider: str | None = None,
        request_id: str | None = None,
        correlation_id: str | None = None,
    ):
        super().__init__(message, provider, request_id, correlation_id)
        self.retry_after = retry_after


class OverloadedError(LLMError):
    """529: vendor temporarily overloaded."""

    retryable = True


class TimeoutError(LLMError):
    """Request exceeded the configured timeout (or 408)."""

    retryable = True


class InvalidRequestError(LLMError):
    """400: request rejected as malformed (bad parameters, too many tokens)."""


class ContentFilterError(LLMError):
    """Request or output blocked by the vendor's safety system."""


class ProviderError(LLMError):
    """5xx or connection failure on the vendor side."""

    retryable = True


class ModelNotFoundError(LLMError):
    """404: unknown model identifier."""

