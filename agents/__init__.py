"""
IntelliBid - Agents Package

CrewAI agents for document analysis, the six stakeholder evaluations and
the AI procurement features.
"""

from agents.base import (
    get_llm,
    get_default_llm,
    validate_json_output,
    AgentRun,
    run_agent_task,
)
from agents.role_task import build_role_task, build_standard_block
from agents.roles import ROLE_AGENTS, RoleAgentSpec, get_fallback_insights
from agents.requirement_analysis_agent import analyze_requirements
from agents.proposal_analysis_agent import analyze_proposal, vendor_name_from_filename
from agents.followup_agent import generate_followup_questions
from agents.comparison_agent import generate_vendor_comparison
from agents.briefing_agent import generate_executive_briefing

__all__ = [
    # Base
    "get_llm",
    "get_default_llm",
    "validate_json_output",
    "AgentRun",
    "run_agent_task",
    # Role evaluation
    "build_role_task",
    "build_standard_block",
    "ROLE_AGENTS",
    "RoleAgentSpec",
    "get_fallback_insights",
    # Documents
    "analyze_requirements",
    "analyze_proposal",
    "vendor_name_from_filename",
    # Features
    "generate_followup_questions",
    "generate_vendor_comparison",
    "generate_executive_briefing",
]
