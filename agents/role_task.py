"""
Role Evaluation Task

Shared task template for the six stakeholder agents. Each role supplies
its own focus areas and score keys; the answer format is identical.
"""

from typing import Optional

from crewai import Agent, Task


ROLE_OUTPUT_RULES = """IMPORTANT: You must output ONLY valid JSON. No explanatory text before or after the JSON.
All scores are integers from 0 to 100."""


def build_standard_block(standard_name: Optional[str], section_names: list[str]) -> str:
    """
    Describe organisation compliance sections the vendor must be checked against.

    Returns an empty string when nothing is tagged.
    """
    if not standard_name or not section_names:
        return ""

    lines = "\n".join(f"- {name}" for name in section_names)
    return f"""
ORGANIZATION-SPECIFIC COMPLIANCE REQUIREMENTS:
Standard: {standard_name}
Evaluate the proposal explicitly against these sections:
{lines}
Reflect gaps against these sections in your scores and insights.
"""


def build_role_task(
    agent: Agent,
    perspective: str,
    focus_areas: list[str],
    score_guide: dict[str, str],
    requirements: str,
    proposal: str,
    vendor_name: str,
    standard_block: str = ""
) -> Task:
    """
    Create an evaluation task for a single stakeholder perspective.

    Args:
        agent: The role agent that will answer
        perspective: Human readable role label, e.g. "Delivery Manager"
        focus_areas: What this role pays attention to
        score_guide: Score key -> meaning, in output order
        requirements: Requirement analysis (JSON text)
        proposal: Proposal analysis (JSON text)
        vendor_name: Vendor being evaluated
        standard_block: Optional organisation compliance block
    """
    focus = "\n".join(f"{i}. {area}" for i, area in enumerate(focus_areas, 1))
    guide = "\n".join(f"- {key}: {meaning}" for key, meaning in score_guide.items())
    scores_schema = ",\n        ".join(f'"{key}": 0' for key in score_guide)

    return Task(
        description=f"""As the {perspective}, evaluate the proposal from vendor "{vendor_name}"
against the airline's RFT requirements.

FOCUS AREAS:
{focus}

REQUIREMENTS:
{requirements}

VENDOR PROPOSAL ({vendor_name}):
{proposal}
{standard_block}
SCORING GUIDE:
{guide}

Output a JSON object with this structure:
{{
    "insights": ["4-5 concise, specific insights from the {perspective} perspective"],
    "scores": {{
        {scores_schema}
    }},
    "rationale": "2-3 sentence justification of the scores",
    "status": "recommended | under-review | risk-flagged"
}}

{ROLE_OUTPUT_RULES}""",
        expected_output="A valid JSON object with insights, scores, rationale and status",
        agent=agent
    )
