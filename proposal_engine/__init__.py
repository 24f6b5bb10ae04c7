"""AI content generation for web design proposals."""

from .config import GenerationConfig
from .models import (
    AIErrorCode,
    GenerateOptions,
    GeneratedDocument,
    GenerationResult,
    PromptContext,
    ProposalSection,
)
from .services import AIServiceError, ProposalGenerator

__version__ = "0.1.0"

__all__ = [
    "GenerationConfig",
    "ProposalGenerator",
    "AIServiceError",
    "AIErrorCode",
    "GenerateOptions",
    "GeneratedDocument",
    "GenerationResult",
    "PromptContext",
    "ProposalSection",
]
