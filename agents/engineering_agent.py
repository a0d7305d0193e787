"""
Engineering Lead Agent

Looks at the solution from the team that will build on and operate it:
APIs, SDKs, documentation and vendor support.
"""

from crewai import Agent, Task

from agents.base import get_default_llm, AGENT_VERBOSE
from agents.role_task import build_role_task


ENGINEERING_PROMPT = """You are the Engineering Lead who will own integration and day-two
operations of the selected system. You have been burned by vendors with
undocumented APIs and slow support queues, so you look for well designed APIs,
usable SDKs, clear documentation and a support model that matches a 24/7
airline operation."""

ENGINEERING_FOCUS = [
    "API and SDK quality and openness",
    "Technical documentation completeness",
    "Developer experience and tooling",
    "Support model, SLAs and escalation paths",
    "Effort to integrate, test and operate the solution",
]

ENGINEERING_SCORES = {
    "overall": "overall engineering suitability",
    "technicalFit": "technical quality of the solution",
    "integration": "ease of building integrations",
    "support": "quality of the vendor support model",
    "documentation": "quality of technical documentation",
}

ENGINEERING_FALLBACK_INSIGHTS = [
    "API and SDK quality require hands-on technical evaluation",
    "Documentation completeness needs engineering team review",
    "Developer experience should be validated through POC",
    "Technical support model requires further investigation",
]


def create_engineering_agent() -> Agent:
    """Create the Engineering Lead agent."""
    return Agent(
        role="Engineering Lead",
        goal="Assess how easy the solution is to integrate, extend and operate",
        backstory=ENGINEERING_PROMPT,
        llm=get_default_llm(),
        verbose=AGENT_VERBOSE,
        allow_delegation=False
    )


def create_engineering_task(
    agent: Agent,
    requirements: str,
    proposal: str,
    vendor_name: str,
    standard_block: str = ""
) -> Task:
    """Create the engineering evaluation task."""
    return build_role_task(
        agent,
        "Engineering Lead",
        ENGINEERING_FOCUS,
        ENGINEERING_SCORES,
        requirements,
        proposal,
        vendor_name,
        standard_block
    )
