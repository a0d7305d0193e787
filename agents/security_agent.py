"""
Cybersecurity Agent

Reviews security controls, data protection and certifications
(ISO 27001, SOC 2, PCI DSS, GDPR) relevant to an airline.
"""

from crewai import Agent, Task

from agents.base import get_default_llm, AGENT_VERBOSE
from agents.role_task import build_role_task


SECURITY_PROMPT = """You are the airline's Cybersecurity Architect. Airline systems hold passenger
personal data and payment card data and support safety-relevant operations, so
you insist on evidence of certifications, strong identity and access management,
encryption of data at rest and in transit, and a credible incident response
process. Claims without evidence count as gaps."""

SECURITY_FOCUS = [
    "Security certifications (ISO 27001, SOC 2, PCI DSS)",
    "Data protection, privacy and GDPR compliance",
    "Identity, access management and encryption",
    "Vulnerability management and incident response",
    "Compliance with aviation and organisational security standards",
]

SECURITY_SCORES = {
    "overall": "overall security posture",
    "compliance": "compliance with security standards and regulations",
}

SECURITY_FALLBACK_INSIGHTS = [
    "Security and compliance posture requires detailed audit",
    "Data protection mechanisms need security team validation",
    "Certification and standards compliance requires verification",
    "Risk assessment and remediation plan need expert review",
]


def create_security_agent() -> Agent:
    """Create the Cybersecurity agent."""
    return Agent(
        role="Cybersecurity Architect",
        goal="Verify the vendor meets the airline's security and compliance requirements",
        backstory=SECURITY_PROMPT,
        llm=get_default_llm(),
        verbose=AGENT_VERBOSE,
        allow_delegation=False
    )


def create_security_task(
    agent: Agent,
    requirements: str,
    proposal: str,
    vendor_name: str,
    standard_block: str = ""
) -> Task:
    """Create the security evaluation task."""
    return build_role_task(
        agent,
        "Cybersecurity Architect",
        SECURITY_FOCUS,
        SECURITY_SCORES,
        requirements,
        proposal,
        vendor_name,
        standard_block
    )
