"""
Database Models

SQLAlchemy models for IntelliBid: portfolios, RFT projects, vendor proposals,
multi-agent evaluations and their side tables.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional, List

from sqlalchemy import (
    String, Text, Integer, Boolean, DateTime, Float, JSON, Uuid,
    ForeignKey, Index, UniqueConstraint
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.sql import func


# JSONB on PostgreSQL, plain JSON elsewhere (sqlite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


# ============================================================================
# PORTFOLIO & PROJECT MODELS
# ============================================================================

class Portfolio(Base):
    """Business portfolio grouping RFT projects (e.g. Flight Operations)."""
    __tablename__ = "portfolios"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now()
    )

    projects: Mapped[List["Project"]] = relationship(
        back_populates="portfolio",
        cascade="all, delete-orphan",
        passive_deletes=True
    )


class Project(Base):
    """
    RFT evaluation project.

    Status: analyzing, completed
    """
    __tablename__ = "projects"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    portfolio_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("portfolios.id", ondelete="CASCADE"),
        nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    initiative_name: Mapped[Optional[str]] = mapped_column(String(255))
    vendor_list: Mapped[Optional[list]] = mapped_column(JSONType)
    status: Mapped[str] = mapped_column(String(50), default="analyzing")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now()
    )

    portfolio: Mapped["Portfolio"] = relationship(back_populates="projects")

    __table_args__ = (
        Index("idx_projects_portfolio", "portfolio_id"),
    )


class Standard(Base):
    """Organisation compliance standard with taggable sections."""
    __tablename__ = "standards"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    category: Mapped[str] = mapped_column(String(100), default="general")
    # [{"id": "...", "name": "...", "description": "..."}]
    sections: Mapped[list] = mapped_column(JSONType, default=list)
    tags: Mapped[Optional[list]] = mapped_column(JSONType)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now()
    )


# ============================================================================
# DOCUMENT MODELS
# ============================================================================

class Requirement(Base):
    """Requirement document uploaded for a project (RFT by default)."""
    __tablename__ = "requirements"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False
    )
    document_type: Mapped[str] = mapped_column(String(50), default="RFT")
    file_name: Mapped[str] = mapped_column(String(500), nullable=False)
    extracted_data: Mapped[Optional[dict]] = mapped_column(JSONType)
    standard_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("standards.id", ondelete="SET NULL")
    )
    tagged_sections: Mapped[Optional[list]] = mapped_column(JSONType)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now()
    )

    __table_args__ = (
        Index("idx_requirements_project", "project_id"),
    )


class Proposal(Base):
    """Vendor proposal document for a project."""
    __tablename__ = "proposals"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False
    )
    vendor_name: Mapped[str] = mapped_column(String(255), nullable=False)
    document_type: Mapped[str] = mapped_column(String(50), default="proposal")
    file_name: Mapped[str] = mapped_column(String(500), nullable=False)
    extracted_data: Mapped[Optional[dict]] = mapped_column(JSONType)
    # Questionnaire-derived scores: {"product": .., "nfr": .., "cybersecurity": .., "agile": .., ...}
    excel_scores: Mapped[Optional[dict]] = mapped_column(JSONType)
    standard_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("standards.id", ondelete="SET NULL")
    )
    tagged_sections: Mapped[Optional[list]] = mapped_column(JSONType)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now()
    )

    __table_args__ = (
        Index("idx_proposals_project", "project_id"),
    )


# ============================================================================
# EVALUATION MODELS
# ============================================================================

class Evaluation(Base):
    """
    Aggregated multi-agent evaluation of one proposal.

    Status: recommended, under-review, risk-flagged
    """
    __tablename__ = "evaluations"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False
    )
    proposal_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("proposals.id", ondelete="CASCADE"),
        nullable=False
    )
    overall_score: Mapped[int] = mapped_column(Integer, default=0)
    functional_fit: Mapped[int] = mapped_column(Integer, default=0)
    technical_fit: Mapped[int] = mapped_column(Integer, default=0)
    delivery_risk: Mapped[int] = mapped_column(Integer, default=0)
    cost: Mapped[str] = mapped_column(Text, default="Not specified")
    compliance: Mapped[int] = mapped_column(Integer, default=0)
    status: Mapped[str] = mapped_column(String(50), default="under-review")
    ai_rationale: Mapped[Optional[str]] = mapped_column(Text)
    role_insights: Mapped[Optional[dict]] = mapped_column(JSONType)
    detailed_scores: Mapped[Optional[dict]] = mapped_column(JSONType)
    section_compliance: Mapped[Optional[list]] = mapped_column(JSONType)
    agent_diagnostics: Mapped[Optional[list]] = mapped_column(JSONType)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("proposal_id", name="uq_evaluation_proposal"),
        Index("idx_evaluations_project", "project_id"),
    )


class EvaluationCriteria(Base):
    """Per-role scored criterion of an evaluation, editable by reviewers."""
    __tablename__ = "evaluation_criteria"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    evaluation_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("evaluations.id", ondelete="CASCADE"),
        nullable=False
    )
    role: Mapped[str] = mapped_column(String(50), nullable=False)
    section: Mapped[str] = mapped_column(String(255), nullable=False)
    question: Mapped[str] = mapped_column(Text, nullable=False)
    score: Mapped[int] = mapped_column(Integer, nullable=False)
    score_label: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now()
    )

    __table_args__ = (
        Index("idx_criteria_evaluation_role", "evaluation_id", "role"),
    )


class AgentMetric(Base):
    """One role agent execution (latency, tokens, cost, outcome)."""
    __tablename__ = "agent_metrics"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # Evaluation id, or "{project_id}-{vendor}" when the vendor run never persisted
    evaluation_id: Mapped[str] = mapped_column(String(255), nullable=False)
    project_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    vendor_name: Mapped[str] = mapped_column(String(255), nullable=False)
    agent_role: Mapped[str] = mapped_column(String(50), nullable=False)
    execution_time_ms: Mapped[int] = mapped_column(Integer, default=0)
    token_usage: Mapped[int] = mapped_column(Integer, default=0)
    estimated_cost_usd: Mapped[float] = mapped_column(Float, default=0.0)
    success: Mapped[bool] = mapped_column(Boolean, default=True)
    error_type: Mapped[Optional[str]] = mapped_column(String(50))
    error_message: Mapped[Optional[str]] = mapped_column(Text)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now()
    )

    __table_args__ = (
        Index("idx_agent_metrics_timestamp", "timestamp"),
        Index("idx_agent_metrics_role", "agent_role"),
        Index("idx_agent_metrics_evaluation", "evaluation_id"),
    )


# ============================================================================
# SHORTLISTING & AI FEATURE MODELS
# ============================================================================

class VendorShortlistingStage(Base):
    """Current shortlisting stage (1-10) of a vendor within a project."""
    __tablename__ = "vendor_shortlisting_stages"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False
    )
    vendor_name: Mapped[str] = mapped_column(String(255), nullable=False)
    current_stage: Mapped[int] = mapped_column(Integer, default=1)
    # {"1": {"status": "completed", "date": "..."}, ...}
    stage_statuses: Mapped[dict] = mapped_column(JSONType, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow
    )

    __table_args__ = (
        UniqueConstraint("project_id", "vendor_name", name="uq_vendor_stage"),
    )


class FollowupQuestion(Base):
    """Clarifying question for a vendor, generated from its proposal."""
    __tablename__ = "followup_questions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False
    )
    proposal_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("proposals.id", ondelete="CASCADE"),
        nullable=False
    )
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    priority: Mapped[str] = mapped_column(String(50), nullable=False)
    question: Mapped[str] = mapped_column(Text, nullable=False)
    context: Mapped[Optional[str]] = mapped_column(Text)
    related_section: Mapped[Optional[str]] = mapped_column(String(255))
    ai_rationale: Mapped[Optional[str]] = mapped_column(Text)
    is_answered: Mapped[bool] = mapped_column(Boolean, default=False)
    answer: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow
    )


class ComparisonSnapshot(Base):
    """Saved side-by-side vendor comparison matrix."""
    __tablename__ = "comparison_snapshots"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    comparison_type: Mapped[str] = mapped_column(String(50), default="full")
    vendor_ids: Mapped[list] = mapped_column(JSONType, default=list)
    comparison_data: Mapped[dict] = mapped_column(JSONType, nullable=False)
    highlights: Mapped[Optional[dict]] = mapped_column(JSONType)
    meta: Mapped[Optional[dict]] = mapped_column("metadata", JSONType)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now()
    )


class ExecutiveBriefing(Base):
    """Stakeholder-specific markdown briefing for a project."""
    __tablename__ = "executive_briefings"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False
    )
    stakeholder_role: Mapped[str] = mapped_column(String(50), nullable=False)
    briefing_type: Mapped[str] = mapped_column(String(50), default="summary")
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    key_findings: Mapped[Optional[list]] = mapped_column(JSONType)
    recommendations: Mapped[Optional[dict]] = mapped_column(JSONType)
    meta: Mapped[Optional[dict]] = mapped_column("metadata", JSONType)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now()
    )
