"""AI error codes and user-facing messages.

Shared by the generation pipeline (which raises ``AIServiceError`` with
these codes) and by callers that render errors to users.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict


class AIErrorCode(str, Enum):
    """Error codes for the proposal generation pipeline."""
    # API errors
    API_KEY_MISSING = "API_KEY_MISSING"
    API_KEY_INVALID = "API_KEY_INVALID"
    API_RATE_LIMITED = "API_RATE_LIMITED"
    API_OVERLOADED = "API_OVERLOADED"
    API_TIMEOUT = "API_TIMEOUT"
    CONTENT_FILTERED = "CONTENT_FILTERED"
    INVALID_REQUEST = "INVALID_REQUEST"

    # Response errors
    RESPONSE_EMPTY = "RESPONSE_EMPTY"
    RESPONSE_INVALID_JSON = "RESPONSE_INVALID_JSON"
    RESPONSE_MISSING_FIELDS = "RESPONSE_MISSING_FIELDS"
    RESPONSE_SCHEMA_MISMATCH = "RESPONSE_SCHEMA_MISMATCH"

    # Context errors
    CONTEXT_INSUFFICIENT = "CONTEXT_INSUFFICIENT"
    CONTEXT_TOO_LARGE = "CONTEXT_TOO_LARGE"

    UNKNOWN = "UNKNOWN"


ErrorAction = Literal[
    "Retry",
    "Contact Support",
    "Edit Consultation",
    "View Partial Results",
]


class ErrorMessageInfo(BaseModel):
    """User-facing description of an error code."""
    model_config = ConfigDict(frozen=True)

    title: str
    description: str
    action: Optional[ErrorAction] = None


ERROR_MESSAGES: dict[AIErrorCode, ErrorMessageInfo] = {
    AIErrorCode.API_KEY_MISSING: ErrorMessageInfo(
        title="Configuration Error",
        description="AI service is not configured. Please contact support.",
        action="Contact Support",
    ),
    AIErrorCode.API_KEY_INVALID: ErrorMessageInfo(
        title="Authentication Error",
        description="AI service credentials are invalid. Please contact support.",
        action="Contact Support",
    ),
    AIErrorCode.API_RATE_LIMITED: ErrorMessageInfo(
        title="Service Busy",
        description="Too many requests. Please try again in a few seconds.",
        action="Retry",
    ),
    AIErrorCode.API_OVERLOADED: ErrorMessageInfo(
        title="Service Temporarily Unavailable",
        description="The AI service is experiencing high demand. Please try again shortly.",
        action="Retry",
    ),
    AIErrorCode.API_TIMEOUT: ErrorMessageInfo(
        title="Request Timeout",
        description="The request took too long. Please try again.",
        action="Retry",
    ),
    AIErrorCode.CONTENT_FILTERED: ErrorMessageInfo(
        title="Content Blocked",
        description="The AI service declined to generate this content.",
        action="Edit Consultation",
    ),
    AIErrorCode.INVALID_REQUEST: ErrorMessageInfo(
        title="Invalid Request",
        description="The AI service rejected the request.",
        action="Contact Support",
    ),
    AIErrorCode.RESPONSE_EMPTY: ErrorMessageInfo(
        title="Empty Response",
        description="No content was generated. Please try again.",
        action="Retry",
    ),
    AIErrorCode.RESPONSE_INVALID_JSON: ErrorMessageInfo(
        title="Generation Failed",
        description="The AI response was malformed. This is usually temporary.",
        action="Retry",
    ),
    AIErrorCode.RESPONSE_MISSING_FIELDS: ErrorMessageInfo(
        title="Partial Generation",
        description="Some sections could not be generated. You can edit manually or retry.",
        action="View Partial Results",
    ),
    AIErrorCode.RESPONSE_SCHEMA_MISMATCH: ErrorMessageInfo(
        title="Invalid Response Format",
        description="The generated content did not match expected format.",
        action="Retry",
    ),
    AIErrorCode.CONTEXT_INSUFFICIENT: ErrorMessageInfo(
        title="More Information Needed",
        description="Please complete more consultation fields before generating.",
        action="Edit Consultation",
    ),
    AIErrorCode.CONTEXT_TOO_LARGE: ErrorMessageInfo(
        title="Content Too Large",
        description="The consultation data exceeds processing limits.",
        action="Contact Support",
    ),
    AIErrorCode.UNKNOWN: ErrorMessageInfo(
        title="Unexpected Error",
        description="Something went wrong. Please try again.",
        action="Retry",
    ),
}

RETRYABLE_CODES = frozenset({
    AIErrorCode.API_RATE_LIMITED,
    AIErrorCode.API_OVERLOADED,
    AIErrorCode.API_TIMEOUT,
    AIErrorCode.RESPONSE_EMPTY,
    AIErrorCode.RESPONSE_INVALID_JSON,
    AIErrorCode.RESPONSE_SCHEMA_MISMATCH,
    AIErrorCode.RESPONSE_MISSING_FIELDS,
})


def get_error_message(code: AIErrorCode) -> ErrorMessageInfo:
    """User-facing message info for an error code."""
    return ERROR_MESSAGES[code]


def is_retryable_error(code: AIErrorCode) -> bool:
    """Default retryability for an error code."""
    return code in RETRYABLE_CODES
