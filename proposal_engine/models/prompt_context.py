"""Prompt context models.

The read-only description of the client business, its challenges and
goals, optional website audit results and the agency's own profile.
Assembled by request-handling code from consultation and proposal records.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

WebsiteStatus = Literal["refresh", "rebuild", "none"]
UrgencyLevel = Literal["low", "medium", "high", "critical"]
BrandVoice = Literal["professional", "friendly", "technical"]


class AuditMetric(BaseModel):
    """One metric from a website performance audit."""
    model_config = ConfigDict(frozen=True)

    value: str = "N/A"
    category: str = "unknown"
    description: Optional[str] = None


class PerformanceDataContext(BaseModel):
    """Performance audit results for the client's current website."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    performance: float = Field(ge=0, le=100, description="Overall score out of 100")
    metrics: Dict[str, AuditMetric] = Field(default_factory=dict)
    recommendations: List[str] = Field(default_factory=list)
    audited_url: str = Field(default="Unknown", alias="auditedUrl")
    audited_at: str = Field(default="Unknown", alias="auditedAt")


class AgencyPackage(BaseModel):
    """A service package the agency offers."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    price_range: str = Field(alias="priceRange")
    features: List[str] = Field(default_factory=list)


class AgencyContext(BaseModel):
    """Agency profile used to tailor tone and content."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    brand_voice: Optional[BrandVoice] = Field(default=None, alias="brandVoice")
    packages: List[AgencyPackage] = Field(default_factory=list)
    usps: List[str] = Field(default_factory=list)


class PromptContext(BaseModel):
    """Everything the model needs to write a proposal."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    # Client data (from consultation)
    business_name: str = Field(default="Unknown Business", alias="businessName")
    contact_person: str = Field(default="Client", alias="contactPerson")
    industry: str = "General"
    business_type: str = Field(default="Business", alias="businessType")
    website_status: WebsiteStatus = Field(default="refresh", alias="websiteStatus")
    website: Optional[str] = None

    # Challenges & goals
    primary_challenges: List[str] = Field(default_factory=list, alias="primaryChallenges")
    urgency_level: UrgencyLevel = Field(default="medium", alias="urgencyLevel")
    primary_goals: List[str] = Field(default_factory=list, alias="primaryGoals")
    conversion_goal: Optional[str] = Field(default=None, alias="conversionGoal")
    budget_range: str = Field(default="unknown", alias="budgetRange")
    timeline: Optional[str] = None

    # Preferences
    design_styles: List[str] = Field(default_factory=list, alias="designStyles")
    admired_websites: Optional[str] = Field(default=None, alias="admiredWebsites")
    consultation_notes: Optional[str] = Field(default=None, alias="consultationNotes")

    performance_data: Optional[PerformanceDataContext] = Field(
        default=None, alias="performanceData"
    )

    agency: AgencyContext

    def to_payload(self) -> Dict[str, Any]:
        """Serialize with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
