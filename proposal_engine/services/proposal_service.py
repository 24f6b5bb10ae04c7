"""Proposal content generation service.

Builds a prompt from the caller's context, calls the configured provider,
and validates the raw text into a ``GenerationResult``:

- ``generate``: one request for all sections, retried with exponential
  backoff on retryable failures
- ``generate_single_section``: regenerate one section, strictly
- ``generate_concurrently``: one request per section, bounded fan-out
- ``stream``: incremental text events, validated once the stream ends
  (no retry on this path)
"""

import asyncio
import logging
import math
import uuid
from collections.abc import AsyncIterator, Iterable, Sequence
from dataclasses import dataclass, field

from ..config import GenerationConfig
from ..llm.client import create_provider
from ..llm.models import ChatMessage, LLMRequest, LLMResponse
from ..llm.providers.base import LLMProvider
from ..llm.retry import with_retry
from ..models.error_codes import AIErrorCode
from ..models.generation import (
    ChunkEvent,
    DoneEvent,
    ErrorEvent,
    GenerateOptions,
    GenerationResult,
    TokenUsage,
)
from ..models.prompt_context import PromptContext
from ..models.proposal import GeneratedDocument, ProposalSection
from .ai_errors import AIServiceError, classify
from .prompts import PromptBuilder, build_proposal_prompt
from .response_parser import extract_partial_content, parse_ai_response

logger = logging.getLogger(__name__)

# Rough characters-per-token ratio used for context size estimates
CHARS_PER_TOKEN = 4

# Leave room for output tokens
MAX_CONTEXT_TOKENS = 80_000


# ==============================================================================
# Context checks
# ==============================================================================

@dataclass(frozen=True)
class ContextValidation:
    """Result of checking a context before generation."""
    valid: bool
    missing_fields: list[str] = field(default_factory=list)


def validate_context(context: PromptContext) -> ContextValidation:
    """Check the context has the minimum data needed for a useful proposal."""
    missing: list[str] = []

    if not context.business_name or context.business_name == "Unknown Business":
        missing.append("Business Name")
    if not context.industry or context.industry == "General":
        missing.append("Industry")
    if not context.primary_challenges:
        missing.append("Primary Challenges")
    if not context.primary_goals:
        missing.append("Primary Goals")

    return ContextValidation(valid=not missing, missing_fields=missing)


def estimate_token_count(
    context: PromptContext,
    prompt_builder: PromptBuilder = build_proposal_prompt,
) -> int:
    """Approximate input tokens for the context alone (no section prompts)."""
    _, user = prompt_builder(context, [])
    return math.ceil(len(user) / CHARS_PER_TOKEN)


def is_context_too_large(
    context: PromptContext,
    limit: int = MAX_CONTEXT_TOKENS,
    prompt_builder: PromptBuilder = build_proposal_prompt,
) -> bool:
    return estimate_token_count(context, prompt_builder) > limit


def ensure_context_ready(
    context: PromptContext,
    limit: int = MAX_CONTEXT_TOKENS,
    prompt_builder: PromptBuilder = build_proposal_prompt,
) -> None:
    """Raise a fatal AIServiceError if the context cannot be used.

    Raises:
        AIServiceError: CONTEXT_INSUFFICIENT or CONTEXT_TOO_LARGE.
    """
    validation = validate_context(context)
    if not validation.valid:
        raise AIServiceError(
            f"Missing required fields: {', '.join(validation.missing_fields)}",
            AIErrorCode.CONTEXT_INSUFFICIENT,
            retryable=False,
            details={"missing_fields": validation.missing_fields},
        )
    if is_context_too_large(context, limit, prompt_builder):
        raise AIServiceError(
            "Consultation data exceeds processing limits",
            AIErrorCode.CONTEXT_TOO_LARGE,
            retryable=False,
            details={"limit": limit},
        )


def try_extract_partial(raw_text: str) -> GeneratedDocument:
    """Recover whatever sections can be salvaged from a failed response."""
    return extract_partial_content(raw_text)


# ==============================================================================
# Helpers
# ==============================================================================

def _distinct_sections(sections: Iterable[ProposalSection | str]) -> list[ProposalSection]:
    """Requested sections in first-seen order, duplicates removed."""
    distinct = list(dict.fromkeys(ProposalSection(s) for s in sections))
    if not distinct:
        raise ValueError("At least one section must be requested")
    return distinct


def _partition(
    content: GeneratedDocument, sections: Sequence[ProposalSection]
) -> tuple[list[ProposalSection], list[ProposalSection]]:
    generated = [s for s in sections if content.has_section(s)]
    failed = [s for s in sections if not content.has_section(s)]
    return generated, failed


def _build_result(
    content: GeneratedDocument,
    sections: Sequence[ProposalSection],
    usage: TokenUsage | None,
) -> GenerationResult:
    generated, failed = _partition(content, sections)
    return GenerationResult(
        content=content,
        is_partial=bool(failed),
        generated_sections=generated,
        failed_sections=failed,
        usage=usage,
    )


def _usage_from(response: LLMResponse) -> TokenUsage:
    return TokenUsage(
        input_tokens=response.usage.prompt_tokens,
        output_tokens=response.usage.completion_tokens,
    )


# ==============================================================================
# Generator
# ==============================================================================

class ProposalGenerator:
    """Generates proposal sections through an LLM provider.

    Holds no per-call state; concurrent calls are independent.
    """

    def __init__(
        self,
        config: GenerationConfig | None = None,
        provider: LLMProvider | None = None,
        prompt_builder: PromptBuilder | None = None,
    ):
        """Initialize the generator.

        Args:
            config: Pipeline settings. Defaults to ``GenerationConfig.from_env()``.
            provider: Provider to call. Defaults to the one named by the config.
            prompt_builder: Prompt assembler. Defaults to ``build_proposal_prompt``.
        """
        self._config = config or GenerationConfig.from_env()
        self._provider = provider or create_provider(self._config)
        self._build_prompt = prompt_builder or build_proposal_prompt

    @property
    def config(self) -> GenerationConfig:
        return self._config

    @property
    def provider(self) -> LLMProvider:
        return self._provider

    def _build_request(
        self,
        context: PromptContext,
        sections: Sequence[ProposalSection],
        options: GenerateOptions,
    ) -> LLMRequest:
        system, user = self._build_prompt(context, sections)
        return LLMRequest(
            messages=[
                ChatMessage(role="system", content=system),
                ChatMessage(role="user", content=user),
            ],
            model=options.model or self._config.model,
            temperature=self._config.temperature,
            max_tokens=self._config.max_tokens,
        )

    async def _attempt(
        self,
        request: LLMRequest,
        sections: Sequence[ProposalSection],
        allow_partial: bool,
        correlation_id: str,
    ) -> GenerationResult:
        """One provider call plus validation. Raises AIServiceError only."""
        try:
            response = await self._provider.generate(request)
        except AIServiceError:
            raise
        except Exception as e:
            raise classify(e) from e

        logger.info(
            "LLM request succeeded",
            extra={
                "correlation_id": correlation_id,
                "provider": response.provider,
                "model": response.model,
                "latency_ms": response.latency_ms,
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "finish_reason": response.finish_reason,
            },
        )

        if not response.text or not response.text.strip():
            raise AIServiceError(
                "No text content in response",
                AIErrorCode.RESPONSE_EMPTY,
                retryable=True,
            )

        try:
            content = parse_ai_response(
                response.text,
                allow_partial=allow_partial,
                required_sections=None if allow_partial else sections,
            )
        except AIServiceError:
            raise
        except Exception as e:
            raise classify(e) from e
        return _build_result(content, sections, _usage_from(response))

    async def generate(
        self,
        context: PromptContext,
        sections: Sequence[ProposalSection | str],
        options: GenerateOptions | None = None,
    ) -> GenerationResult:
        """Generate the requested sections in one request.

        Args:
            context: Client, audit and agency context.
            sections: Sections to generate; duplicates are ignored.
            options: Retry, partial-result and model overrides.

        Returns:
            The validated result. With ``allow_partial`` (the default),
            sections that failed validation are listed in ``failed_sections``.

        Raises:
            AIServiceError: A non-retryable failure, or the last failure once
                retries are exhausted.
            ValueError: If ``sections`` is empty.
        """
        options = options or GenerateOptions()
        requested = _distinct_sections(sections)
        max_retries = (
            options.max_retries if options.max_retries is not None else self._config.max_retries
        )
        correlation_id = str(uuid.uuid4())
        request = self._build_request(context, requested, options)

        logger.debug(
            "Generating %d section(s)",
            len(requested),
            extra={
                "correlation_id": correlation_id,
                "sections": [s.value for s in requested],
                "allow_partial": options.allow_partial,
            },
        )

        try:
            result = await with_retry(
                lambda: self._attempt(request, requested, options.allow_partial, correlation_id),
                max_retries=max_retries,
                initial_delay=self._config.retry_initial_delay,
                correlation_id=correlation_id,
            )
        except AIServiceError as e:
            logger.error(
                "Proposal generation failed: %s",
                e.message,
                extra={
                    "correlation_id": correlation_id,
                    "code": e.code.value,
                    "retryable": e.retryable,
                },
            )
            raise

        if result.is_partial:
            logger.warning(
                "Partial generation: %d of %d section(s) failed",
                len(result.failed_sections),
                len(requested),
                extra={
                    "correlation_id": correlation_id,
                    "failed_sections": [s.value for s in result.failed_sections],
                },
            )
        return result

    async def generate_single_section(
        self,
        context: PromptContext,
        section: ProposalSection | str,
        options: GenerateOptions | None = None,
    ) -> GenerationResult:
        """Regenerate one section; a missing or invalid section raises."""
        options = (options or GenerateOptions()).model_copy(update={"allow_partial": False})
        return await self.generate(context, [section], options)

    async def generate_concurrently(
        self,
        context: PromptContext,
        sections: Sequence[ProposalSection | str],
        options: GenerateOptions | None = None,
        max_concurrency: int | None = None,
    ) -> GenerationResult:
        """Generate each section in its own request, a few at a time.

        A section whose request fails is reported in ``failed_sections``.

        Raises:
            AIServiceError: If every section fails, or if any fails while
                ``allow_partial`` is False.
        """
        options = options or GenerateOptions()
        requested = _distinct_sections(sections)
        limit = max_concurrency or self._config.max_concurrency
        if limit < 1:
            raise ValueError(f"max_concurrency must be >= 1, got {limit}")
        semaphore = asyncio.Semaphore(limit)

        async def run_section(
            section: ProposalSection,
        ) -> tuple[ProposalSection, GenerationResult | None, AIServiceError | None]:
            async with semaphore:
                try:
                    result = await self.generate_single_section(context, section, options)
                    return section, result, None
                except AIServiceError as e:
                    return section, None, e

        outcomes = await asyncio.gather(*(run_section(s) for s in requested))

        values: dict = {}
        usage = TokenUsage()
        errors: list[AIServiceError] = []
        for section, result, error in outcomes:
            if result is None:
                errors.append(error)
                continue
            values[section.name] = result.content.get_section(section)
            if result.usage is not None:
                usage = usage + result.usage

        if errors and (not values or not options.allow_partial):
            raise errors[-1]

        return _build_result(GeneratedDocument(**values), requested, usage)

    async def stream(
        self,
        context: PromptContext,
        sections: Sequence[ProposalSection | str],
        options: GenerateOptions | None = None,
    ) -> AsyncIterator[ChunkEvent | DoneEvent | ErrorEvent]:
        """Stream generation events.

        Yields zero or more ``ChunkEvent`` followed by exactly one terminal
        ``DoneEvent`` or ``ErrorEvent``. Failures are never retried here;
        they end the stream with an ``ErrorEvent``.

        Raises:
            ValueError: If ``sections`` is empty.
        """
        options = options or GenerateOptions()
        requested = _distinct_sections(sections)
        correlation_id = str(uuid.uuid4())
        chunks: list[str] = []

        try:
            request = self._build_request(context, requested, options)
            async for text in self._provider.stream(request):
                if not text:
                    continue
                chunks.append(text)
                yield ChunkEvent(text=text)

            full_text = "".join(chunks)
            logger.debug(
                "Stream finished, %d chars received",
                len(full_text),
                extra={"correlation_id": correlation_id, "preview": full_text[:500]},
            )

            content = parse_ai_response(
                full_text,
                allow_partial=options.allow_partial,
                required_sections=None if options.allow_partial else requested,
            )
        except Exception as e:
            error = classify(e)
            logger.error(
                "Proposal stream failed: %s",
                error.message,
                extra={"correlation_id": correlation_id, "code": error.code.value},
            )
            yield ErrorEvent(code=error.code, message=error.message)
            return

        generated, failed = _partition(content, requested)
        logger.debug(
            "Stream parsed",
            extra={
                "correlation_id": correlation_id,
                "generated_sections": [s.value for s in generated],
                "failed_sections": [s.value for s in failed],
            },
        )
        yield DoneEvent(
            content=content,
            generated_sections=generated,
            failed_sections=failed,
        )
