"""
Database Package

SQLAlchemy models and async connection management.
"""

from database.connection import (
    get_db,
    get_db_context,
    init_db,
    close_db,
    get_engine,
    get_session_factory,
)

from database.models import (
    Base,
    Portfolio,
    Project,
    Standard,
    Requirement,
    Proposal,
    Evaluation,
    EvaluationCriteria,
    AgentMetric,
    VendorShortlistingStage,
    FollowupQuestion,
    ComparisonSnapshot,
    ExecutiveBriefing,
)

__all__ = [
    # Connection
    "get_db",
    "get_db_context",
    "init_db",
    "close_db",
    "get_engine",
    "get_session_factory",
    # Models
    "Base",
    "Portfolio",
    "Project",
    "Standard",
    "Requirement",
    "Proposal",
    "Evaluation",
    "EvaluationCriteria",
    "AgentMetric",
    "VendorShortlistingStage",
    "FollowupQuestion",
    "ComparisonSnapshot",
    "ExecutiveBriefing",
]
