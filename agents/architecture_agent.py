"""
Solution Architect Agent

Reviews architecture patterns, integration approach, scalability and
alignment with enterprise and compliance standards.
"""

from crewai import Agent, Task

from agents.base import get_default_llm, AGENT_VERBOSE
from agents.role_task import build_role_task


ARCHITECTURE_PROMPT = """You are an Enterprise Solution Architect for an airline group.
You own the target architecture for cloud, integration and data platforms and you
review every new system for fit with it. You are wary of proprietary lock-in,
point-to-point integrations and designs that will not survive peak operational
load during disruption."""

ARCHITECTURE_FOCUS = [
    "Fit with the airline's target architecture and cloud strategy",
    "Integration patterns (APIs, events, messaging) with core airline systems",
    "Scalability and resilience under peak and disruption load",
    "Alignment with architecture and regulatory standards",
    "Technical debt and migration path",
]

ARCHITECTURE_SCORES = {
    "overall": "overall architectural fit",
    "technicalFit": "fit of the technical design",
    "compliance": "alignment with architecture and regulatory standards",
    "integration": "quality of the integration approach",
    "scalability": "scalability and resilience",
}

ARCHITECTURE_FALLBACK_INSIGHTS = [
    "Architecture patterns require technical deep-dive review",
    "Integration approach needs enterprise architect validation",
    "Scalability and security posture require dedicated assessment",
    "Technical debt and migration path need detailed planning",
]


def create_architecture_agent() -> Agent:
    """Create the Solution Architect agent."""
    return Agent(
        role="Solution Architect",
        goal="Validate the vendor's architecture against the airline's enterprise standards",
        backstory=ARCHITECTURE_PROMPT,
        llm=get_default_llm(),
        verbose=AGENT_VERBOSE,
        allow_delegation=False
    )


def create_architecture_task(
    agent: Agent,
    requirements: str,
    proposal: str,
    vendor_name: str,
    standard_block: str = ""
) -> Task:
    """Create the architecture evaluation task."""
    return build_role_task(
        agent,
        "Solution Architect",
        ARCHITECTURE_FOCUS,
        ARCHITECTURE_SCORES,
        requirements,
        proposal,
        vendor_name,
        standard_block
    )
