"""
AI Feature Schemas

Follow-up questions, vendor comparison matrices and executive briefings.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class QuestionCategory(str, Enum):
    TECHNICAL = "technical"
    DELIVERY = "delivery"
    COST = "cost"
    COMPLIANCE = "compliance"
    CLARIFICATION = "clarification"


class QuestionPriority(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class StakeholderRole(str, Enum):
    """Executive audiences a briefing can be written for."""
    CEO = "CEO"
    CTO = "CTO"
    CFO = "CFO"
    CISO = "CISO"
    COO = "COO"
    PROJECT_MANAGER = "PROJECT_MANAGER"


class FollowupQuestionItem(BaseModel):
    """A generated clarifying question for a vendor."""
    category: QuestionCategory
    priority: QuestionPriority
    question: str
    context: str = ""
    related_section: Optional[str] = Field(default=None, alias="relatedSection")
    ai_rationale: str = Field(default="", alias="aiRationale")

    model_config = {"populate_by_name": True}


class DimensionScore(BaseModel):
    score: int = Field(default=0, ge=0, le=100)
    summary: str = ""


class ComparisonDimensions(BaseModel):
    technical_capability: DimensionScore = Field(default_factory=DimensionScore, alias="technicalCapability")
    delivery_risk: DimensionScore = Field(default_factory=DimensionScore, alias="deliveryRisk")
    cost_competitiveness: DimensionScore = Field(default_factory=DimensionScore, alias="costCompetitiveness")
    compliance: DimensionScore = Field(default_factory=DimensionScore)
    innovation: DimensionScore = Field(default_factory=DimensionScore)
    team_experience: DimensionScore = Field(default_factory=DimensionScore, alias="teamExperience")

    model_config = {"populate_by_name": True}


class VendorComparison(BaseModel):
    """One vendor's column in a comparison matrix."""
    vendor_name: str = Field(alias="vendorName")
    proposal_id: Optional[str] = Field(default=None, alias="proposalId")
    overall_score: int = Field(default=0, alias="overallScore")
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    dimensions: ComparisonDimensions = Field(default_factory=ComparisonDimensions)

    model_config = {"populate_by_name": True}


class ComparisonRecommendation(BaseModel):
    top_choice: str = Field(default="", alias="topChoice")
    rationale: str = ""
    risk_mitigations: list[str] = Field(default_factory=list, alias="riskMitigations")

    model_config = {"populate_by_name": True}


class ComparisonMatrix(BaseModel):
    """Full vendor comparison as returned by the comparison agent."""
    comparison_title: str = Field(alias="comparisonTitle")
    executive_summary: str = Field(default="", alias="executiveSummary")
    vendors: list[VendorComparison]
    recommendations: ComparisonRecommendation
    key_differentiators: list[str] = Field(default_factory=list, alias="keyDifferentiators")

    model_config = {"populate_by_name": True}


class RiskSummary(BaseModel):
    risks: list[str] = Field(default_factory=list)
    mitigations: list[str] = Field(default_factory=list)


class BriefingContent(BaseModel):
    """Structured executive briefing before markdown rendering."""
    top_recommendation: str = Field(alias="topRecommendation")
    key_findings: list[str] = Field(alias="keyFindings")
    risk_summary: RiskSummary = Field(alias="riskSummary")
    next_steps: list[str] = Field(alias="nextSteps")

    model_config = {"populate_by_name": True}
