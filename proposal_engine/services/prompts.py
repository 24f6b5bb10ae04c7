"""Prompt templates for AI proposal generation.

Assembles the client, audit and agency context into a system prompt and a
user prompt asking for a JSON object with one key per requested section.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any, Protocol

from ..models.prompt_context import AgencyPackage, PerformanceDataContext, PromptContext
from ..models.proposal import ProposalSection


class PromptBuilder(Protocol):
    """Callable that turns context and sections into (system, user) prompts."""

    def __call__(
        self, context: PromptContext, sections: Sequence[ProposalSection]
    ) -> tuple[str, str]: ...


# ==============================================================================
# System prompt
# ==============================================================================

PROPOSAL_SYSTEM_PROMPT = """You are a professional web design proposal writer for a web agency.

## Your Role
Generate compelling, specific proposal sections from client consultation data and website performance audits. Show that the agency understands the client's challenges and has a clear plan.

## Writing Guidelines
- Professional but approachable tone
- Specific to the client's industry and stated challenges
- Reference actual audit data when available
- Use the client's business name, metrics and goals; avoid generic filler

## Performance Score Interpretation
- Performance 0-49: Critical, likely losing customers
- Performance 50-89: Needs improvement
- Performance 90-100: Good, focus on other growth opportunities

## Core Web Vitals
- LCP: Good < 2.5s, Poor > 4s
- CLS: Good < 0.1, Poor > 0.25
- INP: Good < 200ms, Poor > 500ms
- FCP: Good < 1.8s, Poor > 3s

## Text Content Rules
Write prose sections in plain text, without markdown formatting.

## Output Format
Return ONLY valid JSON matching the schema provided. No text before or after the JSON object."""


# ==============================================================================
# Section instructions
# ==============================================================================

SECTION_PROMPTS: dict[ProposalSection, str] = {
    ProposalSection.executive_summary: """Write a 2-3 paragraph executive summary that opens with the client's core challenge, acknowledges their goals, positions the proposed solution and ends with a confident call to action. 150-250 words, plain text.""",
    ProposalSection.opportunity_content: """Describe the market opportunity for {businessType} businesses in {industry}, connected to the client's goals. Do not fabricate statistics. 100-200 words, plain text.""",
    ProposalSection.current_issues: """List 3-6 current website issues drawn from the stated challenges, the audit data (if any) and common problems for {websiteStatus} websites. Each needs a non-technical title, a business-impact description, an impact level (high/medium/low) and a source (pagespeed/consultation/inferred).""",
    ProposalSection.performance_standards: """Give 3-5 performance targets. With audit data, focus on poor or needs-improvement metrics with current and target values. Without it, use industry benchmarks and set current values to "To be measured". Express improvements in business terms.""",
    ProposalSection.roi_analysis: """Estimate return on investment over a stated time period. Include a disclaimer, the assumptions made, and projections with current and projected estimates and a confidence level (low/medium/high). Be conservative.""",
    ProposalSection.proposed_pages: """Suggest 5-10 website pages suited to a {businessType} business in {industry} and the client's goals, each with a short purpose and a priority (essential/recommended/optional).""",
    ProposalSection.timeline: """Lay out a realistic project timeline for a {timeline} schedule and a {budgetRange} budget, typically Discovery, Design, Development, Testing and Launch. Each phase needs a duration, week range, deliverables and any client tasks.""",
    ProposalSection.next_steps: """List 3-5 clear next steps (review proposal, sign and pay deposit, kickoff call, questionnaire, project start), adjusted to the client's urgency. Each has an order, action, description and owner (client/agency/both).""",
    ProposalSection.closing_content: """Write a closing paragraph addressed to {contactPerson} that references their main goal and ends with a soft call to action. 50-100 words, warm, plain text.""",
}

# Example shapes shown to the model for structured sections
OUTPUT_SHAPES: dict[ProposalSection, Any] = {
    ProposalSection.current_issues: [{
        "title": "string",
        "description": "string",
        "impact": "high|medium|low",
        "source": "pagespeed|consultation|inferred",
    }],
    ProposalSection.performance_standards: [{
        "metric": "string",
        "current": "string",
        "target": "string",
        "improvement": "string",
    }],
    ProposalSection.roi_analysis: {
        "disclaimer": "string",
        "timePeriod": "string",
        "assumptions": ["string"],
        "projections": [{
            "metric": "string",
            "currentEstimate": "string",
            "projectedEstimate": "string",
            "improvement": "string",
            "confidence": "low|medium|high",
        }],
    },
    ProposalSection.proposed_pages: [{
        "name": "string",
        "purpose": "string",
        "priority": "essential|recommended|optional",
    }],
    ProposalSection.timeline: [{
        "phase": "string",
        "duration": "string",
        "timing": "string",
        "deliverables": ["string"],
    }],
    ProposalSection.next_steps: [{
        "order": "number",
        "action": "string",
        "description": "string",
        "owner": "client|agency|both",
    }],
}


# ==============================================================================
# Builders
# ==============================================================================

def interpolate_prompt(prompt: str, context: PromptContext) -> str:
    """Fill ``{placeholder}`` slots in a section prompt."""
    replacements = {
        "{industry}": context.industry,
        "{businessType}": context.business_type,
        "{websiteStatus}": context.website_status,
        "{contactPerson}": context.contact_person,
        "{timeline}": context.timeline or "flexible",
        "{budgetRange}": context.budget_range,
    }
    for placeholder, value in replacements.items():
        prompt = prompt.replace(placeholder, value)
    return prompt


def build_output_schema(sections: Sequence[ProposalSection]) -> dict[str, Any]:
    """Expected JSON shape for the requested sections."""
    return {
        section.value: OUTPUT_SHAPES.get(section, "<string content>")
        for section in sections
    }


def build_performance_section(data: PerformanceDataContext) -> str:
    metrics_text = "\n".join(
        f"  - {key}: {metric.value} ({metric.category})"
        for key, metric in data.metrics.items()
    )
    recommendations = "\n".join(f"- {r}" for r in data.recommendations[:5])
    return (
        "## PageSpeed Audit Data\n"
        f"- Audited URL: {data.audited_url}\n"
        f"- Audited At: {data.audited_at}\n"
        f"- Overall Performance Score: {data.performance:g}/100\n\n"
        "### Core Web Vitals\n"
        f"{metrics_text or '  - No metrics available'}\n\n"
        "### Recommendations\n"
        f"{recommendations or '- No recommendations available'}"
    )


def _packages_text(packages: Sequence[AgencyPackage]) -> str:
    lines = [
        f"  - {p.name} ({p.price_range}): {', '.join(p.features[:3])}"
        for p in packages
    ]
    return "- Available Packages:\n" + "\n".join(lines)


def build_user_prompt(context: PromptContext, sections: Sequence[ProposalSection]) -> str:
    """Build the user prompt for the given context and sections."""
    challenges = "\n".join(f"- {c}" for c in context.primary_challenges)
    goals = "\n".join(f"- {g}" for g in context.primary_goals)

    preferences = [
        f"- Preferred Styles: {', '.join(context.design_styles)}"
        if context.design_styles
        else "- No style preferences specified"
    ]
    if context.admired_websites:
        preferences.append(f"- Admired Websites: {context.admired_websites}")
    if context.consultation_notes:
        preferences.append(f"- Additional Notes: {context.consultation_notes}")

    if context.performance_data:
        performance = build_performance_section(context.performance_data)
    else:
        performance = (
            "## PageSpeed Data\n"
            "No audit data available. Use industry-standard benchmarks for performance targets."
        )

    agency = context.agency
    agency_lines = [f"- Agency Name: {agency.name}"]
    if agency.brand_voice:
        agency_lines.append(f"- Brand Voice: {agency.brand_voice}")
    if agency.usps:
        agency_lines.append(f"- Key Differentiators: {', '.join(agency.usps)}")
    if agency.packages:
        agency_lines.append(_packages_text(agency.packages))

    section_text = "\n\n".join(
        f"- {section.value}: {interpolate_prompt(SECTION_PROMPTS.get(section, ''), context)}"
        for section in sections
    )

    return f"""
## Client Information
- Business Name: {context.business_name}
- Contact Person: {context.contact_person}
- Industry: {context.industry}
- Business Type: {context.business_type}
- Current Website: {context.website or 'None'}
- Website Status: {context.website_status}

## Challenges
{challenges}
- Urgency Level: {context.urgency_level}

## Goals
{goals}
- Primary Conversion Goal: {context.conversion_goal or 'Not specified'}
- Budget Range: {context.budget_range}
- Timeline Preference: {context.timeline or 'Flexible'}

## Design Preferences
{chr(10).join(preferences)}

{performance}

## Agency Context
{chr(10).join(agency_lines)}

## Sections to Generate
Generate ONLY the following sections:
{section_text}

## Required Output Format
Return a JSON object with these exact keys:
{json.dumps(build_output_schema(sections), indent=2)}

Remember: Return ONLY the JSON object, no other text."""


def build_proposal_prompt(
    context: PromptContext, sections: Sequence[ProposalSection]
) -> tuple[str, str]:
    """Default prompt builder: returns (system, user)."""
    return PROPOSAL_SYSTEM_PROMPT, build_user_prompt(context, sections)
