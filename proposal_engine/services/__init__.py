"""Proposal generation services."""

from .ai_errors import AIServiceError, classify, classify_status
from .prompts import PromptBuilder, build_proposal_prompt
from .proposal_service import (
    ContextValidation,
    ProposalGenerator,
    ensure_context_ready,
    estimate_token_count,
    is_context_too_large,
    try_extract_partial,
    validate_context,
)
from .response_parser import extract_partial_content, parse_ai_response, validate_sections
from .sse import SSE_HEADERS, encode_sse_event, stream_as_sse

__all__ = [
    "AIServiceError",
    "classify",
    "classify_status",
    "PromptBuilder",
    "build_proposal_prompt",
    "ProposalGenerator",
    "ContextValidation",
    "validate_context",
    "estimate_token_count",
    "is_context_too_large",
    "ensure_context_ready",
    "try_extract_partial",
    "parse_ai_response",
    "validate_sections",
    "extract_partial_content",
    "SSE_HEADERS",
    "encode_sse_event",
    "stream_as_sse",
]
