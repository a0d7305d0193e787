"""
Requirement Analysis Agent

Extracts scope, technical requirements, weighted evaluation criteria and
success metrics from an RFT document.
"""

from crewai import Agent, Task

from agents.base import get_default_llm, AGENT_VERBOSE, run_agent_task, validate_json_output


REQUIREMENT_ANALYSIS_PROMPT = """You are an expert airline IT procurement analyst.
You read Requests for Tender and turn them into a precise, structured view of
what the airline is buying and how bids will be judged. You never invent
requirements that are not in the document.

IMPORTANT: You must output ONLY valid JSON. No explanatory text before or after the JSON."""

# Keep prompts within the model context window
MAX_DOCUMENT_CHARS = 60000


def create_requirement_analysis_agent() -> Agent:
    """Create the Requirement Analysis agent."""
    return Agent(
        role="RFT Requirements Analyst",
        goal="Extract a structured, faithful summary of the RFT requirements",
        backstory=REQUIREMENT_ANALYSIS_PROMPT,
        llm=get_default_llm(),
        verbose=AGENT_VERBOSE,
        allow_delegation=False
    )


def create_requirement_analysis_task(agent: Agent, document_text: str) -> Task:
    """Create the requirement extraction task."""
    return Task(
        description=f"""Analyze the following RFT document and extract its requirements.

DOCUMENT:
{document_text[:MAX_DOCUMENT_CHARS]}

Output a JSON object with this exact structure:
{{
    "scope": "One paragraph describing what is being procured",
    "technicalRequirements": ["Each technical requirement as a short statement"],
    "evaluationCriteria": [
        {{"name": "Criterion name", "weight": 25, "description": "How it is judged"}}
    ],
    "successMetrics": ["Measurable success metric"]
}}

Weights are percentages; use 0 when the document gives none.""",
        expected_output="A valid JSON object with scope, technicalRequirements, evaluationCriteria and successMetrics",
        agent=agent
    )


async def analyze_requirements(document_text: str) -> dict:
    """
    Analyze an RFT document.

    Args:
        document_text: Extracted text of the document

    Returns:
        Structured requirement analysis as dict
    """
    agent = create_requirement_analysis_agent()
    task = create_requirement_analysis_task(agent, document_text)

    run = await run_agent_task(agent, task)

    required_keys = ["scope", "technicalRequirements", "evaluationCriteria", "successMetrics"]
    return validate_json_output(run.raw, required_keys)
