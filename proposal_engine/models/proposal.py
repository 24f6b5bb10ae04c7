"""Proposal content models for AI generation.

Design goal:
- One model per independently generatable proposal section
- GeneratedDocument is a partial mapping: a missing section means its
  generation or validation failed, not that it is empty
- Wire keys are camelCase to match the model output and the templates
  that consume it

Pydantic v2. Instances are frozen once built.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ProposalSection(str, Enum):
    """One named, independently generatable unit of proposal content."""
    executive_summary = "executiveSummary"
    opportunity_content = "opportunityContent"
    current_issues = "currentIssues"
    performance_standards = "performanceStandards"
    roi_analysis = "roiAnalysis"
    proposed_pages = "proposedPages"
    timeline = "timeline"
    next_steps = "nextSteps"
    closing_content = "closingContent"


ALL_SECTIONS: tuple[ProposalSection, ...] = tuple(ProposalSection)

STRING_SECTIONS = frozenset({
    ProposalSection.executive_summary,
    ProposalSection.opportunity_content,
    ProposalSection.closing_content,
})

LIST_SECTIONS = frozenset({
    ProposalSection.current_issues,
    ProposalSection.performance_standards,
    ProposalSection.proposed_pages,
    ProposalSection.timeline,
    ProposalSection.next_steps,
})

SECTION_DISPLAY_NAMES: dict[ProposalSection, str] = {
    ProposalSection.executive_summary: "Executive Summary",
    ProposalSection.opportunity_content: "Market Opportunity",
    ProposalSection.current_issues: "Current Issues",
    ProposalSection.performance_standards: "Performance Standards",
    ProposalSection.roi_analysis: "ROI Analysis",
    ProposalSection.proposed_pages: "Proposed Pages",
    ProposalSection.timeline: "Project Timeline",
    ProposalSection.next_steps: "Next Steps",
    ProposalSection.closing_content: "Closing",
}

Impact = Literal["high", "medium", "low"]
IssueSource = Literal["pagespeed", "consultation", "inferred"]
PagePriority = Literal["essential", "recommended", "optional"]
StepOwner = Literal["client", "agency", "both"]
Confidence = Literal["low", "medium", "high"]


class _ContentModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    def to_dict(self) -> dict[str, Any]:
        """Serialize with camelCase keys, dropping unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True)


class CurrentIssue(_ContentModel):
    """A problem with the client's current website."""
    title: str = Field(description="Clear, non-technical title")
    description: str = Field(default="", description="Business-impact focused description")
    impact: Impact = "medium"
    source: IssueSource = "inferred"
    metric: Optional[str] = Field(default=None, description="Specific metric or data point")


class PerformanceStandard(_ContentModel):
    """A before/after performance target."""
    metric: str
    current: str = "N/A"
    target: str = "Improved"
    improvement: str = ""
    business_impact: Optional[str] = Field(default=None, alias="businessImpact")


class ROIProjection(_ContentModel):
    """A single projected business metric. Never guessed or normalized."""
    metric: str
    current_estimate: str = Field(alias="currentEstimate")
    projected_estimate: str = Field(alias="projectedEstimate")
    improvement: str
    confidence: Confidence


class ROIAnalysis(_ContentModel):
    """Return-on-investment projections with their caveats."""
    disclaimer: str
    projections: List[ROIProjection] = Field(default_factory=list)
    assumptions: List[str] = Field(default_factory=list)
    time_period: str = Field(alias="timePeriod")


class ProposedPage(_ContentModel):
    """A page recommended for the new website."""
    name: str
    purpose: str = ""
    priority: PagePriority = "recommended"
    features: Optional[List[str]] = None


class TimelinePhase(_ContentModel):
    """One phase of the project schedule."""
    phase: str
    duration: str = ""
    timing: str = ""
    deliverables: List[str] = Field(default_factory=list)
    client_tasks: Optional[List[str]] = Field(default=None, alias="clientTasks")


class NextStep(_ContentModel):
    """An action to move the engagement forward."""
    order: int = 1
    action: str
    description: str = ""
    owner: StepOwner = "agency"


SectionValue = Union[
    str,
    List[CurrentIssue],
    List[PerformanceStandard],
    List[ProposedPage],
    List[TimelinePhase],
    List[NextStep],
    ROIAnalysis,
]


class GeneratedDocument(_ContentModel):
    """Partial mapping from section to validated content."""
    executive_summary: Optional[str] = Field(default=None, alias="executiveSummary")
    opportunity_content: Optional[str] = Field(default=None, alias="opportunityContent")
    current_issues: Optional[List[CurrentIssue]] = Field(default=None, alias="currentIssues")
    performance_standards: Optional[List[PerformanceStandard]] = Field(
        default=None, alias="performanceStandards"
    )
    roi_analysis: Optional[ROIAnalysis] = Field(default=None, alias="roiAnalysis")
    proposed_pages: Optional[List[ProposedPage]] = Field(default=None, alias="proposedPages")
    timeline: Optional[List[TimelinePhase]] = None
    next_steps: Optional[List[NextStep]] = Field(default=None, alias="nextSteps")
    closing_content: Optional[str] = Field(default=None, alias="closingContent")

    def get_section(self, section: ProposalSection | str) -> Optional[SectionValue]:
        """Content for ``section``, or None if it is absent."""
        return getattr(self, ProposalSection(section).name)

    def has_section(self, section: ProposalSection | str) -> bool:
        return self.get_section(section) is not None

    def present_sections(self) -> list[ProposalSection]:
        """Sections with content, in canonical order."""
        return [s for s in ALL_SECTIONS if self.has_section(s)]

    @property
    def is_empty(self) -> bool:
        return not self.present_sections()
