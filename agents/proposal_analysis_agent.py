"""
Proposal Analysis Agent

Extracts the vendor's capabilities, approach, integrations, security, support,
cost structure and timeline from a proposal document.
"""

from pathlib import Path

from crewai import Agent, Task

from agents.base import get_default_llm, AGENT_VERBOSE, run_agent_task, validate_json_output


PROPOSAL_ANALYSIS_PROMPT = """You are an expert bid evaluator for airline technology tenders.
You read vendor proposals and summarise exactly what the vendor commits to,
separating firm commitments from marketing language.

IMPORTANT: You must output ONLY valid JSON. No explanatory text before or after the JSON."""

MAX_DOCUMENT_CHARS = 60000

PLACEHOLDER_VENDOR_NAMES = {"", "unknown", "vendor name"}


def vendor_name_from_filename(file_name: str) -> str:
    """Derive a vendor name from an upload name, e.g. "acme_air-systems.pdf" -> "acme air systems"."""
    stem = Path(file_name).stem
    return stem.replace("-", " ").replace("_", " ").strip()


def create_proposal_analysis_agent() -> Agent:
    """Create the Proposal Analysis agent."""
    return Agent(
        role="Vendor Proposal Analyst",
        goal="Extract a structured summary of what the vendor proposes",
        backstory=PROPOSAL_ANALYSIS_PROMPT,
        llm=get_default_llm(),
        verbose=AGENT_VERBOSE,
        allow_delegation=False
    )


def create_proposal_analysis_task(agent: Agent, document_text: str) -> Task:
    """Create the proposal extraction task."""
    return Task(
        description=f"""Analyze the following vendor proposal.

DOCUMENT:
{document_text[:MAX_DOCUMENT_CHARS]}

Output a JSON object with this exact structure:
{{
    "vendorName": "Company name of the vendor",
    "capabilities": ["Key capability"],
    "technicalApproach": "Summary of the proposed solution and architecture",
    "integrations": ["System or standard the solution integrates with"],
    "security": "Security controls and certifications claimed",
    "support": "Support model and SLAs",
    "costStructure": "Pricing model and amounts as stated",
    "timeline": "Implementation timeline as stated"
}}""",
        expected_output="A valid JSON object describing the vendor proposal",
        agent=agent
    )


async def analyze_proposal(document_text: str, file_name: str) -> dict:
    """
    Analyze a vendor proposal.

    The vendor name falls back to one derived from the file name when the
    document does not state it.
    """
    agent = create_proposal_analysis_agent()
    task = create_proposal_analysis_task(agent, document_text)

    run = await run_agent_task(agent, task)
    data = validate_json_output(run.raw, ["capabilities", "technicalApproach"])

    vendor = str(data.get("vendorName") or "").strip()
    if vendor.lower() in PLACEHOLDER_VENDOR_NAMES:
        data["vendorName"] = vendor_name_from_filename(file_name)

    return data
