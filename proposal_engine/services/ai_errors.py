"""AI service error handling.

``AIServiceError`` is the single exception type the generation pipeline
lets escape. ``classify`` translates provider-layer and SDK failures into
it; validation failures construct it directly with a fixed retryable flag.
For the codes and user-facing messages, see ``models.error_codes``.
"""

import asyncio
import builtins
from typing import Any

from ..llm.errors import (
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
from ..models.error_codes import (
    AIErrorCode,
    ERROR_MESSAGES,
    ErrorMessageInfo,
    get_error_message,
    is_retryable_error,
)

__all__ = [
    "AIErrorCode",
    "AIServiceError",
    "ERROR_MESSAGES",
    "ErrorMessageInfo",
    "classify",
    "classify_status",
    "get_error_message",
    "is_retryable_error",
]


class AIServiceError(Exception):
    """Failure of the proposal generation pipeline.

    Attributes:
        message: Human-readable description.
        code: Error code from the pipeline's taxonomy.
        retryable: Whether the retry loop may try again.
        details: Optional diagnostic payload (raw text excerpt, missing
            section names, provider request id, ...).
    """

    def __init__(
        self,
        message: str,
        code: AIErrorCode,
        retryable: bool = False,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.retryable = retryable
        self.details = details

    def __repr__(self) -> str:
        return (
            f"AIServiceError(code={self.code.value}, retryable={self.retryable}, "
            f"message={self.message!r})"
        )

    @property
    def user_message(self) -> ErrorMessageInfo:
        return get_error_message(self.code)

    def to_dict(self) -> dict[str, Any]:
        """Serializable form for clients. Details are not included."""
        return {
            "name": "AIServiceError",
            "message": self.message,
            "code": self.code.value,
            "retryable": self.retryable,
        }


# Provider-layer error class -> pipeline code. Order matters: first match wins.
_LLM_ERROR_CODES: tuple[tuple[type[LLMError], AIErrorCode], ...] = (
    (ConfigurationError, AIErrorCode.API_KEY_MISSING),
    (AuthenticationError, AIErrorCode.API_KEY_INVALID),
    (RateLimitError, AIErrorCode.API_RATE_LIMITED),
    (OverloadedError, AIErrorCode.API_OVERLOADED),
    (TimeoutError, AIErrorCode.API_TIMEOUT),
    (ProviderError, AIErrorCode.API_OVERLOADED),
    (ContentFilterError, AIErrorCode.CONTENT_FILTERED),
    (InvalidRequestError, AIErrorCode.INVALID_REQUEST),
    (ModelNotFoundError, AIErrorCode.INVALID_REQUEST),
)


def classify_status(status: int | None) -> AIErrorCode:
    """Pipeline code for a raw HTTP status from the provider."""
    if status in (401, 403):
        return AIErrorCode.API_KEY_INVALID
    if status == 429:
        return AIErrorCode.API_RATE_LIMITED
    if status in (408, 504):
        return AIErrorCode.API_TIMEOUT
    if status is not None and status >= 500:
        # 529 is Anthropic's "overloaded"; other 5xx are treated the same way
        return AIErrorCode.API_OVERLOADED
    return AIErrorCode.UNKNOWN


def _from_llm_error(error: LLMError) -> AIServiceError:
    code = AIErrorCode.UNKNOWN
    for error_cls, mapped in _LLM_ERROR_CODES:
        if isinstance(error, error_cls):
            code = mapped
            break

    details: dict[str, Any] = {}
    if error.provider:
        details["provider"] = error.provider
    if error.request_id:
        details["request_id"] = error.request_id
    if isinstance(error, RateLimitError) and error.retry_after is not None:
        details["retry_after"] = error.retry_after

    return AIServiceError(
        error.message,
        code,
        retryable=is_retryable_error(code),
        details=details or None,
    )


def classify(error: BaseException) -> AIServiceError:
    """Translate any failure into an ``AIServiceError``.

    - ``AIServiceError`` is returned unchanged.
    - Provider-layer ``LLMError`` subclasses map by class.
    - Built-in and asyncio timeouts become a retryable ``API_TIMEOUT``.
    - Objects exposing an HTTP ``status_code`` (raw SDK errors) map by status.
    - Anything else becomes a fatal ``UNKNOWN`` error.

    The original exception is attached as ``__cause__``.
    """
    if isinstance(error, AIServiceError):
        return error

    if isinstance(error, LLMError):
        result = _from_llm_error(error)
    elif isinstance(error, (builtins.TimeoutError, asyncio.TimeoutError)):
        result = AIServiceError(
            str(error) or "AI request timed out",
            AIErrorCode.API_TIMEOUT,
            retryable=True,
            details={"error_type": type(error).__name__},
        )
    else:
        status = getattr(error, "status_code", None)
        if isinstance(status, int):
            code = classify_status(status)
            details = {"status_code": status}
        else:
            code = AIErrorCode.UNKNOWN
            details = {"error_type": type(error).__name__}
        message = str(getattr(error, "message", "") or error) or "Unknown AI API error"
        result = AIServiceError(
            message,
            code,
            retryable=is_retryable_error(code),
            details=details,
        )

    result.__cause__ = error
    return result
