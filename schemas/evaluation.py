"""
Evaluation Schemas

Data models for role agents, their results, the aggregated multi-agent
evaluation and live evaluation progress.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class AgentRole(str, Enum):
    """The six stakeholder perspectives evaluating every proposal."""
    DELIVERY = "delivery"
    PRODUCT = "product"
    ARCHITECTURE = "architecture"
    ENGINEERING = "engineering"
    PROCUREMENT = "procurement"
    SECURITY = "security"

    @property
    def label(self) -> str:
        return ROLE_LABELS[self]


ROLE_LABELS = {
    AgentRole.DELIVERY: "Delivery Manager",
    AgentRole.PRODUCT: "Product Manager",
    AgentRole.ARCHITECTURE: "Solution Architect",
    AgentRole.ENGINEERING: "Engineering Lead",
    AgentRole.PROCUREMENT: "Procurement",
    AgentRole.SECURITY: "Cybersecurity",
}

# Score keys each role is asked to report
ROLE_SCORE_KEYS = {
    AgentRole.DELIVERY: ["overall", "deliveryRisk", "integration"],
    AgentRole.PRODUCT: ["overall", "functionalFit", "scalability", "documentation"],
    AgentRole.ARCHITECTURE: ["overall", "technicalFit", "compliance", "integration", "scalability"],
    AgentRole.ENGINEERING: ["overall", "technicalFit", "integration", "support", "documentation"],
    AgentRole.PROCUREMENT: ["overall", "support"],
    AgentRole.SECURITY: ["overall", "compliance"],
}


class EvaluationStatus(str, Enum):
    """Recommendation status of an agent result or an aggregated evaluation."""
    RECOMMENDED = "recommended"
    UNDER_REVIEW = "under-review"
    RISK_FLAGGED = "risk-flagged"


class AgentStatus(str, Enum):
    """Execution state of a role agent for one vendor."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


class AgentResult(BaseModel):
    """Outcome of one role agent for one proposal (real or fallback)."""
    role: AgentRole
    insights: list[str] = Field(default_factory=list, description="4-5 role-specific insights")
    scores: dict[str, int] = Field(default_factory=dict, description="0-100 score per key")
    rationale: str = Field(default="", description="Short justification")
    status: EvaluationStatus = Field(default=EvaluationStatus.UNDER_REVIEW)
    execution_time_ms: int = Field(default=0, ge=0)
    token_usage: int = Field(default=0, ge=0)
    succeeded: bool = True
    error_type: Optional[str] = Field(default=None, description="timeout or execution_error")
    error_message: Optional[str] = None


class SectionCompliance(BaseModel):
    """Compliance of a proposal against one tagged standard section."""
    section_id: str = Field(alias="sectionId")
    section_name: str = Field(alias="sectionName")
    score: int
    findings: str

    model_config = {"populate_by_name": True}


class AgentDiagnostic(BaseModel):
    """Per-agent execution summary stored with an evaluation."""
    role: AgentRole
    succeeded: bool
    execution_time_ms: int
    token_usage: int
    error_type: Optional[str] = None
    error_message: Optional[str] = None


class MultiAgentEvaluation(BaseModel):
    """Aggregated result of all six role agents for one proposal."""
    overall: int = 0
    functional_fit: int = 0
    technical_fit: int = 0
    delivery_risk: int = 0
    compliance: int = 0
    cost: str = "Not specified"
    status: EvaluationStatus = EvaluationStatus.UNDER_REVIEW
    rationale: str = ""
    role_insights: dict[str, list[str]] = Field(default_factory=dict)
    detailed_scores: dict[str, int] = Field(default_factory=dict)
    section_compliance: list[SectionCompliance] = Field(default_factory=list)
    agent_diagnostics: list[AgentDiagnostic] = Field(default_factory=list)


class ProgressUpdate(BaseModel):
    """Live status change of one role agent for one vendor."""
    project_id: str
    vendor_name: str
    vendor_index: int = Field(..., ge=0)
    total_vendors: int = Field(..., ge=1)
    agent_role: AgentRole
    agent_status: AgentStatus
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
