"""Unit tests for proposal prompt building."""

import json

from proposal_engine.models.prompt_context import PromptContext
from proposal_engine.models.proposal import ProposalSection
from proposal_engine.services.prompts import (
    PROPOSAL_SYSTEM_PROMPT,
    SECTION_PROMPTS,
    build_output_schema,
    build_proposal_prompt,
    build_user_prompt,
    interpolate_prompt,
)


class TestSectionPrompts:
    """Tests for the prompt tables."""

    def test_every_section_has_instructions(self):
        """Test each section has a prompt."""
        assert set(SECTION_PROMPTS) == set(ProposalSection)

    def test_interpolation(self, prompt_context):
        """Test placeholders are replaced from the context."""
        text = interpolate_prompt(SECTION_PROMPTS[ProposalSection.opportunity_content], prompt_context)
        assert "Dental Clinic" in text
        assert "Healthcare" in text
        assert "{" not in text

    def test_timeline_placeholder_default(self, agency):
        """Test a missing timeline reads as flexible."""
        context = PromptContext(agency=agency)
        text = interpolate_prompt(SECTION_PROMPTS[ProposalSection.timeline], context)
        assert "flexible schedule" in text


class TestOutputSchema:
    """Tests for the JSON shape shown to the model."""

    def test_keys_match_sections(self):
        """Test only requested sections appear, keyed by wire name."""
        schema = build_output_schema([ProposalSection.executive_summary, ProposalSection.next_steps])
        assert list(schema) == ["executiveSummary", "nextSteps"]
        assert schema["executiveSummary"] == "<string content>"
        assert schema["nextSteps"][0]["owner"] == "client|agency|both"


class TestBuildUserPrompt:
    """Tests for user prompt assembly."""

    def test_includes_context(self, prompt_context):
        """Test client, audit and agency data appear in the prompt."""
        prompt = build_user_prompt(prompt_context, [ProposalSection.current_issues])

        assert "Business Name: Harbor Dental" in prompt
        assert "- Slow website" in prompt
        assert "Overall Performance Score: 42/100" in prompt
        assert "LCP: 5.1s (poor)" in prompt
        assert "Agency Name: Pixel & Co" in prompt
        assert "Growth ($5k-$8k): Custom design, SEO setup, CMS" in prompt
        assert "Analytics" not in prompt

    def test_requested_sections_only(self, prompt_context):
        """Test the prompt lists only the requested sections."""
        prompt = build_user_prompt(prompt_context, [ProposalSection.closing_content])
        assert "- closingContent:" in prompt
        assert "- executiveSummary:" not in prompt
        schema_text = prompt.split("Return a JSON object with these exact keys:\n", 1)[1]
        schema = json.loads(schema_text.split("\n\nRemember:", 1)[0])
        assert list(schema) == ["closingContent"]

    def test_without_audit_data(self, agency):
        """Test benchmark guidance replaces missing audit data."""
        prompt = build_user_prompt(PromptContext(agency=agency), [ProposalSection.timeline])
        assert "No audit data available" in prompt
        assert "No style preferences specified" in prompt

    def test_build_proposal_prompt(self, prompt_context):
        """Test the default builder returns (system, user)."""
        system, user = build_proposal_prompt(prompt_context, [ProposalSection.timeline])
        assert system == PROPOSAL_SYSTEM_PROMPT
        assert "Sections to Generate" in user
