"""
Delivery Manager Agent

Judges whether the vendor can actually deliver: timeline realism, resourcing,
dependencies and integration effort. Reports delivery risk (higher is riskier).
"""

from crewai import Agent, Task

from agents.base import get_default_llm, AGENT_VERBOSE
from agents.role_task import build_role_task


DELIVERY_PROMPT = """You are a seasoned Delivery Manager at a major airline's IT division.
You have run dozens of vendor implementations across flight operations, crew
scheduling and passenger systems. You know that optimistic timelines and vague
resourcing plans are the most common cause of failed programmes, and you read
every proposal looking for concrete milestones, named resources and realistic
integration effort."""

DELIVERY_FOCUS = [
    "Implementation timeline realism and milestone clarity",
    "Resourcing model, team size and onsite/offshore mix",
    "Dependencies on airline teams and third parties",
    "Integration effort with existing airline systems",
    "Track record delivering similar programmes",
]

DELIVERY_SCORES = {
    "overall": "overall delivery confidence",
    "deliveryRisk": "delivery risk, where HIGHER means RISKIER",
    "integration": "ease of integration into the existing landscape",
}

DELIVERY_FALLBACK_INSIGHTS = [
    "Timeline and resource assessment requires manual review",
    "Risk analysis pending - recommend scheduling follow-up evaluation",
    "Dependencies and milestones need stakeholder validation",
    "Delivery approach should be verified against similar past projects",
]


def create_delivery_agent() -> Agent:
    """Create the Delivery Manager agent."""
    return Agent(
        role="Delivery Manager",
        goal="Assess whether the vendor can deliver on time with acceptable delivery risk",
        backstory=DELIVERY_PROMPT,
        llm=get_default_llm(),
        verbose=AGENT_VERBOSE,
        allow_delegation=False
    )


def create_delivery_task(
    agent: Agent,
    requirements: str,
    proposal: str,
    vendor_name: str,
    standard_block: str = ""
) -> Task:
    """Create the delivery evaluation task."""
    return build_role_task(
        agent,
        "Delivery Manager",
        DELIVERY_FOCUS,
        DELIVERY_SCORES,
        requirements,
        proposal,
        vendor_name,
        standard_block
    )
