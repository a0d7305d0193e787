"""
Procurement Agent

Commercial review: total cost of ownership, pricing model, contract terms
and commercial risk.
"""

from crewai import Agent, Task

from agents.base import get_default_llm, AGENT_VERBOSE
from agents.role_task import build_role_task


PROCUREMENT_PROMPT = """You are a senior Procurement Manager in the airline's strategic sourcing team.
You negotiate multi-year technology contracts and you judge proposals on total
cost of ownership, transparency of the pricing model, contractual protections
and the commercial stability of the vendor."""

PROCUREMENT_FOCUS = [
    "Total cost of ownership over the contract term",
    "Pricing model transparency and hidden costs",
    "Contract terms, SLAs and penalties",
    "Vendor financial stability and commercial risk",
    "Value for money versus market benchmarks",
]

PROCUREMENT_SCORES = {
    "overall": "overall commercial attractiveness",
    "support": "strength of SLAs and support commitments",
}

PROCUREMENT_FALLBACK_INSIGHTS = [
    "TCO analysis requires detailed cost breakdown and validation",
    "Contract terms and SLAs need legal and procurement review",
    "Pricing model should be compared against market benchmarks",
    "Commercial risk assessment requires stakeholder input",
]


def create_procurement_agent() -> Agent:
    """Create the Procurement agent."""
    return Agent(
        role="Procurement Manager",
        goal="Evaluate the commercial value and contractual risk of the proposal",
        backstory=PROCUREMENT_PROMPT,
        llm=get_default_llm(),
        verbose=AGENT_VERBOSE,
        allow_delegation=False
    )


def create_procurement_task(
    agent: Agent,
    requirements: str,
    proposal: str,
    vendor_name: str,
    standard_block: str = ""
) -> Task:
    """Create the procurement evaluation task."""
    return build_role_task(
        agent,
        "Procurement Manager",
        PROCUREMENT_FOCUS,
        PROCUREMENT_SCORES,
        requirements,
        proposal,
        vendor_name,
        standard_block
    )
