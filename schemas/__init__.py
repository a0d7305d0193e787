"""
IntelliBid - Pydantic Schemas

Data models for role agents, evaluations, documents and AI features.
"""

from schemas.evaluation import (
    AgentRole,
    ROLE_LABELS,
    ROLE_SCORE_KEYS,
    EvaluationStatus,
    AgentStatus,
    AgentResult,
    SectionCompliance,
    AgentDiagnostic,
    MultiAgentEvaluation,
    ProgressUpdate,
)
from schemas.documents import (
    EvaluationCriterion,
    RequirementAnalysis,
    ProposalAnalysis,
)
from schemas.features import (
    QuestionCategory,
    QuestionPriority,
    StakeholderRole,
    FollowupQuestionItem,
    ComparisonMatrix,
    VendorComparison,
    BriefingContent,
)

__all__ = [
    # Evaluation
    "AgentRole",
    "ROLE_LABELS",
    "ROLE_SCORE_KEYS",
    "EvaluationStatus",
    "AgentStatus",
    "AgentResult",
    "SectionCompliance",
    "AgentDiagnostic",
    "MultiAgentEvaluation",
    "ProgressUpdate",
    # Documents
    "EvaluationCriterion",
    "RequirementAnalysis",
    "ProposalAnalysis",
    # Features
    "QuestionCategory",
    "QuestionPriority",
    "StakeholderRole",
    "FollowupQuestionItem",
    "ComparisonMatrix",
    "VendorComparison",
    "BriefingContent",
]
