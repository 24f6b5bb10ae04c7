"""Generation request options, results and streaming events.

Pydantic v2. Results and events are frozen once built.
"""

from __future__ import annotations

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator

from .error_codes import AIErrorCode
from .proposal import GeneratedDocument, ProposalSection


class GenerateOptions(BaseModel):
    """Per-call generation options."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    max_retries: Optional[int] = Field(
        default=None,
        ge=0,
        description="Retries after the first attempt; defaults to the configured value (2)",
    )
    allow_partial: bool = Field(
        default=True,
        description="Return validated sections even if others failed",
    )
    model: Optional[str] = Field(default=None, description="Overrides the configured model")


class TokenUsage(BaseModel):
    """Token counts reported by the provider."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    input_tokens: int = Field(default=0, ge=0, alias="inputTokens")
    output_tokens: int = Field(default=0, ge=0, alias="outputTokens")

    def __add__(self, other: TokenUsage) -> TokenUsage:
        return TokenUsage(
            input_tokens=self.input_tokens + other.input_tokens,
            output_tokens=self.output_tokens + other.output_tokens,
        )


class GenerationResult(BaseModel):
    """Outcome of one generation call.

    ``generated_sections`` and ``failed_sections`` partition the distinct
    requested sections; ``is_partial`` is true exactly when something failed.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    content: GeneratedDocument
    is_partial: bool = Field(alias="isPartial")
    generated_sections: List[ProposalSection] = Field(
        default_factory=list, alias="generatedSections"
    )
    failed_sections: List[ProposalSection] = Field(default_factory=list, alias="failedSections")
    usage: Optional[TokenUsage] = None

    @model_validator(mode="after")
    def _check_partition(self) -> GenerationResult:
        if self.is_partial != bool(self.failed_sections):
            raise ValueError("is_partial must be true exactly when failed_sections is non-empty")
        if set(self.generated_sections) & set(self.failed_sections):
            raise ValueError("a section cannot be both generated and failed")
        return self

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ChunkEvent(BaseModel):
    """Incremental text from the provider."""
    model_config = ConfigDict(frozen=True)

    type: Literal["chunk"] = "chunk"
    text: str


class DoneEvent(BaseModel):
    """Terminal event: the stream finished and was validated."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: Literal["done"] = "done"
    content: GeneratedDocument
    generated_sections: List[ProposalSection] = Field(
        default_factory=list, alias="generatedSections"
    )
    failed_sections: List[ProposalSection] = Field(default_factory=list, alias="failedSections")


class ErrorEvent(BaseModel):
    """Terminal event: the stream failed."""
    model_config = ConfigDict(frozen=True)

    type: Literal["error"] = "error"
    code: AIErrorCode
    message: str


StreamEvent = Annotated[
    Union[ChunkEvent, DoneEvent, ErrorEvent],
    Field(discriminator="type"),
]

stream_event_adapter: TypeAdapter[StreamEvent] = TypeAdapter(StreamEvent)
