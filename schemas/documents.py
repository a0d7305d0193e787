"""
Document Schemas

Structured extractions produced from requirement and proposal documents.
"""

from typing import Optional
from pydantic import BaseModel, Field


class EvaluationCriterion(BaseModel):
    """Weighted evaluation criterion stated in an RFT."""
    name: str
    weight: float = Field(default=0, ge=0, le=100, description="Weight in percent")
    description: str = ""


class RequirementAnalysis(BaseModel):
    """Result of analysing an RFT / requirements document."""
    scope: str = Field(default="", description="Scope of the procurement")
    technical_requirements: list[str] = Field(default_factory=list, alias="technicalRequirements")
    evaluation_criteria: list[EvaluationCriterion] = Field(default_factory=list, alias="evaluationCriteria")
    success_metrics: list[str] = Field(default_factory=list, alias="successMetrics")

    model_config = {"populate_by_name": True}


class ProposalAnalysis(BaseModel):
    """Result of analysing a vendor proposal document."""
    vendor_name: str = Field(default="", alias="vendorName")
    capabilities: list[str] = Field(default_factory=list)
    technical_approach: str = Field(default="", alias="technicalApproach")
    integrations: list[str] = Field(default_factory=list)
    security: str = ""
    support: str = ""
    cost_structure: Optional[str] = Field(default=None, alias="costStructure")
    timeline: str = ""

    model_config = {"populate_by_name": True}
