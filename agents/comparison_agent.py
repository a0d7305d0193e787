"""
Vendor Comparison Agent

Builds a side-by-side comparison matrix of several vendors across six
dimensions with a recommended top choice.
"""

from crewai import Agent, Task

from agents.base import get_llm, AGENT_VERBOSE, run_agent_task, validate_json_output


COMPARISON_PROMPT = """You are a bid evaluation chair presenting a shortlist to the airline's
steering committee. You compare vendors on the same dimensions, cite concrete
differentiators and make a clear, defensible recommendation.

IMPORTANT: You must output ONLY valid JSON. No explanatory text before or after the JSON."""


def create_comparison_agent() -> Agent:
    """Create the Vendor Comparison agent."""
    return Agent(
        role="Bid Evaluation Chair",
        goal="Compare vendors consistently and recommend the best fit",
        backstory=COMPARISON_PROMPT,
        llm=get_llm(temperature=0.3),
        verbose=AGENT_VERBOSE,
        allow_delegation=False
    )


def create_comparison_task(
    agent: Agent,
    requirements: str,
    proposals: str,
    vendor_count: int,
    comparison_focus: str
) -> Task:
    """Create the comparison task."""
    return Task(
        description=f"""Compare the following {vendor_count} vendor proposals against the requirements,
with emphasis on {comparison_focus}.

REQUIREMENTS:
{requirements}

PROPOSALS:
{proposals}

Output a JSON object with this exact structure:
{{
    "comparisonTitle": "Short title",
    "executiveSummary": "One paragraph summary",
    "vendors": [
        {{
            "vendorName": "Name",
            "proposalId": "Id as given",
            "overallScore": 0,
            "strengths": ["..."],
            "weaknesses": ["..."],
            "dimensions": {{
                "technicalCapability": {{"score": 0, "summary": "..."}},
                "deliveryRisk": {{"score": 0, "summary": "..."}},
                "costCompetitiveness": {{"score": 0, "summary": "..."}},
                "compliance": {{"score": 0, "summary": "..."}},
                "innovation": {{"score": 0, "summary": "..."}},
                "teamExperience": {{"score": 0, "summary": "..."}}
            }}
        }}
    ],
    "recommendations": {{
        "topChoice": "Vendor name",
        "rationale": "Why",
        "riskMitigations": ["..."]
    }},
    "keyDifferentiators": ["..."]
}}

All scores are integers from 0 to 100.""",
        expected_output="A valid JSON comparison matrix",
        agent=agent
    )


async def generate_vendor_comparison(
    requirements: str,
    proposals: str,
    vendor_count: int,
    comparison_focus: str = "overall fit and value"
) -> dict:
    """Run the comparison agent and return its validated JSON answer."""
    agent = create_comparison_agent()
    task = create_comparison_task(agent, requirements, proposals, vendor_count, comparison_focus)

    run = await run_agent_task(agent, task)
    return validate_json_output(run.raw, ["comparisonTitle", "vendors", "recommendations"])
