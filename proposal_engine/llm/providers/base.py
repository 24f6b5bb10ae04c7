"""Provider interface and shared SDK error translation."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from typing import Any

from ..errors import (
    AuthenticationError,
    ContentFilterError,
    InvalidRequestError,
    LLMError,
    ModelNotFoundError,
    OverloadedError,
    ProviderError,
    RateLimitError,
    TimeoutError,
)
from ..models import LLMRequest, LLMResponse


class LLMProvider(ABC):
    """A text-completion vendor behind a vendor-neutral interface."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Short identifier, e.g. "anthropic"."""
        ...

    @abstractmethod
    async def generate(self, request: LLMRequest) -> LLMResponse:
        """Run one non-streaming completion.

        Raises:
            ConfigurationError: No API key; raised before any network call.
            LLMError: A subclass matching the vendor failure; see
                ``status_error``.
        """
        ...

    @abstractmethod
    def supports(self, feature: str) -> bool:
        """Whether the provider offers ``feature`` (e.g. "streaming")."""
        ...

    async def stream(self, request: LLMRequest) -> AsyncIterator[str]:
        """Yield response text fragments in arrival order.

        Raises the same errors as ``generate``, or NotImplementedError if
        the provider cannot stream.
        """
        raise NotImplementedError("Streaming not supported by this provider")
        # Make this an async generator
        yield ""  # pragma: no cover


def parse_retry_after(error: Any) -> float | None:
    """Read the retry-after header from an SDK status error, if present."""
    response = getattr(error, "response", None)
    if response is None:
        return None
    value = response.headers.get("retry-after")
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def status_error(
    error: Any,
    provider: str,
    vendor: str,
    filter_markers: tuple[str, ...] = ("safety",),
) -> LLMError:
    """Translate an SDK status error into the provider error hierarchy.

    Args:
        error: SDK exception exposing ``status_code`` (and optionally
            ``message``, ``request_id`` and ``response``).
        provider: Provider identifier attached to the error.
        vendor: Display name used in messages.
        filter_markers: Lower-case phrases that mark a 400 as a
            safety-filter rejection.
    """
    status = error.status_code
    message = str(getattr(error, "message", None) or error)
    context = {"provider": provider, "request_id": getattr(error, "request_id", None)}

    if status == 401:
        return AuthenticationError(f"Invalid {vendor} API key", **context)
    if status == 403:
        return AuthenticationError(f"{vendor} access denied: {message}", **context)
    if status == 404:
        return ModelNotFoundError(f"Model not found: {message}", **context)
    if status == 408:
        return TimeoutError(f"{vendor} request timed out: {message}", **context)
    if status == 429:
        return RateLimitError(
            f"{vendor} rate limit exceeded: {message}",
            retry_after=parse_retry_after(error),
            **context,
        )
    if status == 400:
        lowered = message.lower()
        if any(marker in lowered for marker in filter_markers):
            return ContentFilterError(f"Content blocked by {vendor} safety filters: {message}", **context)
        return InvalidRequestError(f"Invalid request to {vendor}: {message}", **context)
    if status == 529:
        return OverloadedError(f"{vendor} is overloaded: {message}", **context)
    if status >= 500:
        return ProviderError(f"{vendor} server error ({status}): {message}", **context)
    return LLMError(f"{vendor} error ({status}): {message}", **context)
