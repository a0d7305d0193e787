"""
Product Manager Agent

Maps the vendor's functionality against the airline's business requirements.
"""

from crewai import Agent, Task

from agents.base import get_default_llm, AGENT_VERBOSE
from agents.role_task import build_role_task


PRODUCT_PROMPT = """You are a Product Manager responsible for airline operational products.
You translate business needs from operations, commercial and customer teams into
requirements, and you care about how completely a vendor's product covers them
out of the box, how it will scale with fleet and passenger growth, and whether
users will be able to adopt it with the documentation provided."""

PRODUCT_FOCUS = [
    "Coverage of functional requirements with standard features",
    "Gaps that need customisation or roadmap items",
    "Scalability with fleet, network and passenger growth",
    "User experience and adoption for airline staff",
    "Quality of product documentation and training material",
]

PRODUCT_SCORES = {
    "overall": "overall product fit",
    "functionalFit": "coverage of functional requirements",
    "scalability": "ability to scale with the business",
    "documentation": "quality of product documentation",
}

PRODUCT_FALLBACK_INSIGHTS = [
    "Product requirements coverage needs detailed mapping",
    "Feature parity analysis requires domain expert review",
    "User experience impact should be validated with stakeholders",
    "Product roadmap alignment requires business owner input",
]


def create_product_agent() -> Agent:
    """Create the Product Manager agent."""
    return Agent(
        role="Product Manager",
        goal="Determine how well the vendor's product meets the airline's functional needs",
        backstory=PRODUCT_PROMPT,
        llm=get_default_llm(),
        verbose=AGENT_VERBOSE,
        allow_delegation=False
    )


def create_product_task(
    agent: Agent,
    requirements: str,
    proposal: str,
    vendor_name: str,
    standard_block: str = ""
) -> Task:
    """Create the product evaluation task."""
    return build_role_task(
        agent,
        "Product Manager",
        PRODUCT_FOCUS,
        PRODUCT_SCORES,
        requirements,
        proposal,
        vendor_name,
        standard_block
    )
