"""
IntelliBid - Crew Package

Multi-agent evaluation orchestration.
"""

from crew.evaluation_crew import (
    EvaluationCrew,
    EvaluationContext,
    AgentRunner,
    crewai_runner,
    aggregate_results,
    derive_status,
    fallback_result,
    parse_agent_output,
)

__all__ = [
    "EvaluationCrew",
    "EvaluationContext",
    "AgentRunner",
    "crewai_runner",
    "aggregate_results",
    "derive_status",
    "fallback_result",
    "parse_agent_output",
]
