"""Domain models for proposal content generation."""

from .error_codes import (
    AIErrorCode,
    ERROR_MESSAGES,
    ErrorMessageInfo,
    get_error_message,
    is_retryable_error,
)
from .generation import (
    ChunkEvent,
    DoneEvent,
    ErrorEvent,
    GenerateOptions,
    GenerationResult,
    StreamEvent,
    TokenUsage,
    stream_event_adapter,
)
from .prompt_context import (
    AgencyContext,
    AgencyPackage,
    AuditMetric,
    PerformanceDataContext,
    PromptContext,
)
from .proposal import (
    ALL_SECTIONS,
    LIST_SECTIONS,
    SECTION_DISPLAY_NAMES,
    STRING_SECTIONS,
    CurrentIssue,
    GeneratedDocument,
    NextStep,
    PerformanceStandard,
    ProposalSection,
    ProposedPage,
    ROIAnalysis,
    ROIProjection,
    TimelinePhase,
)

__all__ = [
    # Error codes
    "AIErrorCode",
    "ERROR_MESSAGES",
    "ErrorMessageInfo",
    "get_error_message",
    "is_retryable_error",
    # Generation
    "GenerateOptions",
    "GenerationResult",
    "TokenUsage",
    "StreamEvent",
    "ChunkEvent",
    "DoneEvent",
    "ErrorEvent",
    "stream_event_adapter",
    # Prompt context
    "PromptContext",
    "AgencyContext",
    "AgencyPackage",
    "AuditMetric",
    "PerformanceDataContext",
    # Proposal content
    "ProposalSection",
    "ALL_SECTIONS",
    "STRING_SECTIONS",
    "LIST_SECTIONS",
    "SECTION_DISPLAY_NAMES",
    "GeneratedDocument",
    "CurrentIssue",
    "PerformanceStandard",
    "ROIAnalysis",
    "ROIProjection",
    "ProposedPage",
    "TimelinePhase",
    "NextStep",
]
