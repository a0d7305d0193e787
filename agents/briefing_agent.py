"""
Executive Briefing Agent

Writes a stakeholder-specific briefing (CEO, CTO, CFO, CISO, COO or
project manager) from the project's evaluations.
"""

from crewai import Agent, Task

from agents.base import get_llm, AGENT_VERBOSE, run_agent_task, validate_json_output


BRIEFING_PROMPT = """You are a chief of staff who prepares decision briefings for airline
executives. You know what each executive cares about: the CFO wants cost and
commercial risk, the CISO wants security exposure, the CTO wants architecture
and delivery confidence. You are concise and lead with the recommendation.

IMPORTANT: You must output ONLY valid JSON. No explanatory text before or after the JSON."""

ROLE_FOCUS = {
    "CEO": "strategic fit, overall value and reputational risk",
    "CTO": "technology fit, architecture and delivery confidence",
    "CFO": "total cost of ownership, pricing and commercial risk",
    "CISO": "security posture, compliance and data protection",
    "COO": "operational impact, continuity and delivery timelines",
    "PROJECT_MANAGER": "timelines, dependencies, resourcing and next actions",
}


def create_briefing_agent() -> Agent:
    """Create the Executive Briefing agent."""
    return Agent(
        role="Executive Briefing Writer",
        goal="Summarise vendor evaluations for a specific executive audience",
        backstory=BRIEFING_PROMPT,
        llm=get_llm(temperature=0.3),
        verbose=AGENT_VERBOSE,
        allow_delegation=False
    )


def create_briefing_task(
    agent: Agent,
    stakeholder_role: str,
    project_name: str,
    evaluations: str,
    proposals: str
) -> Task:
    """Create the briefing task."""
    focus = ROLE_FOCUS.get(stakeholder_role, "overall recommendation")
    return Task(
        description=f"""Write an executive briefing for the {stakeholder_role} on project "{project_name}".
Focus on {focus}.

EVALUATIONS:
{evaluations}

PROPOSALS:
{proposals}

Output a JSON object with this exact structure:
{{
    "topRecommendation": "One sentence recommendation",
    "keyFindings": ["3-6 findings"],
    "riskSummary": {{"risks": ["..."], "mitigations": ["..."]}},
    "nextSteps": ["3-5 concrete next steps"]
}}""",
        expected_output="A valid JSON executive briefing",
        agent=agent
    )


async def generate_executive_briefing(
    stakeholder_role: str,
    project_name: str,
    evaluations: str,
    proposals: str
) -> dict:
    """Run the briefing agent and return its validated JSON answer."""
    agent = create_briefing_agent()
    task = create_briefing_task(agent, stakeholder_role, project_name, evaluations, proposals)

    run = await run_agent_task(agent, task)
    return validate_json_output(
        run.raw,
        ["topRecommendation", "keyFindings", "riskSummary", "nextSteps"]
    )
