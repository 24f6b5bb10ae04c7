"""Pytest fixtures for testing."""

import json
from collections.abc import AsyncIterator
from typing import Any

import pytest

from proposal_engine.config import GenerationConfig
from proposal_engine.llm.models import LLMRequest, LLMResponse, Usage
from proposal_engine.llm.providers.base import LLMProvider
from proposal_engine.models.prompt_context import (
    AgencyContext,
    AgencyPackage,
    AuditMetric,
    PerformanceDataContext,
    PromptContext,
)


def create_mock_response(text: str | None = "{}", provider: str = "anthropic") -> LLMResponse:
    """Create an LLMResponse for testing."""
    return LLMResponse(
        text=text,
        finish_reason="stop",
        usage=Usage(prompt_tokens=120, completion_tokens=80, total_tokens=200),
        model="test-model",
        provider=provider,
        latency_ms=100,
        request_id="req_123",
    )


class FakeProvider(LLMProvider):
    """Scripted provider.

    ``responses`` items are returned (or raised, if exceptions) in order,
    one per ``generate`` call. ``chunks`` items are yielded (or raised) by
    ``stream``.
    """

    def __init__(self, responses: list[Any] | None = None, chunks: list[Any] | None = None):
        self.responses = list(responses or [])
        self.chunks = list(chunks or [])
        self.requests: list[LLMRequest] = []

    @property
    def name(self) -> str:
        return "fake"

    def supports(self, feature: str) -> bool:
        return feature == "streaming"

    async def generate(self, request: LLMRequest) -> LLMResponse:
        self.requests.append(request)
        item = self.responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        if isinstance(item, LLMResponse):
            return item
        return create_mock_response(item)

    async def stream(self, request: LLMRequest) -> AsyncIterator[str]:
        self.requests.append(request)
        for item in self.chunks:
            if isinstance(item, BaseException):
                raise item
            yield item


@pytest.fixture
def agency() -> AgencyContext:
    """Sample agency profile."""
    return AgencyContext(
        name="Pixel & Co",
        brand_voice="friendly",
        packages=[
            AgencyPackage(
                name="Growth",
                price_range="$5k-$8k",
                features=["Custom design", "SEO setup", "CMS", "Analytics"],
            ),
        ],
        usps=["Fast turnaround", "Local team"],
    )


@pytest.fixture
def prompt_context(agency: AgencyContext) -> PromptContext:
    """A complete prompt context with audit data."""
    return PromptContext(
        business_name="Harbor Dental",
        contact_person="Dana",
        industry="Healthcare",
        business_type="Dental Clinic",
        website_status="rebuild",
        website="https://harbordental.example",
        primary_challenges=["Slow website", "Few online bookings"],
        urgency_level="high",
        primary_goals=["More appointment bookings"],
        conversion_goal="Online booking",
        budget_range="$5k-$10k",
        timeline="8 weeks",
        design_styles=["Clean", "Modern"],
        performance_data=PerformanceDataContext(
            performance=42,
            metrics={"LCP": AuditMetric(value="5.1s", category="poor")},
            recommendations=["Compress images"],
            audited_url="https://harbordental.example",
            audited_at="2026-01-10",
        ),
        agency=agency,
    )


@pytest.fixture
def config() -> GenerationConfig:
    """Config with a fake key and no backoff delay."""
    return GenerationConfig(provider="anthropic", api_key="test-key", retry_initial_delay=0)


@pytest.fixture
def full_response_payload() -> dict[str, Any]:
    """A model response covering every section."""
    return {
        "executiveSummary": "Harbor Dental needs a faster site.",
        "opportunityContent": "Patients search online first.",
        "currentIssues": [
            {"title": "Slow load", "description": "LCP is 5.1s", "impact": "High", "source": "audit"},
        ],
        "performanceStandards": [
            {"metric": "LCP", "current": "5.1s", "target": "< 2.5s", "improvement": "50% faster"},
        ],
        "roiAnalysis": {
            "disclaimer": "Estimates only.",
            "timePeriod": "12 months",
            "assumptions": ["Traffic stays flat"],
            "projections": [{
                "metric": "Bookings",
                "currentEstimate": "20/month",
                "projectedEstimate": "30/month",
                "improvement": "+50%",
                "confidence": "medium",
            }],
        },
        "proposedPages": [{"name": "Home", "purpose": "First impression", "priority": "must have"}],
        "timeline": [{"phase": "Discovery", "duration": "1 week", "timing": "Week 1", "deliverables": ["Brief"]}],
        "nextSteps": [{"order": 1, "action": "Review proposal", "owner": "Client"}],
        "closingContent": "We look forward to working with you, Dana.",
    }


@pytest.fixture
def full_response_text(full_response_payload: dict[str, Any]) -> str:
    return json.dumps(full_response_payload)


@pytest.fixture
def fake_provider() -> type[FakeProvider]:
    """The scripted provider class; instantiate with responses or chunks."""
    return FakeProvider


@pytest.fixture
def mock_response() -> Any:
    """Factory for provider responses."""
    return create_mock_response
