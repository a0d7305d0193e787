"""
Follow-up Question Agent

Generates clarifying questions to send a vendor after reading its proposal.
"""

from crewai import Agent, Task

from agents.base import get_llm, AGENT_VERBOSE, run_agent_task, validate_json_output


FOLLOWUP_PROMPT = """You are a procurement evaluator preparing the clarification round of an
airline RFT. You spot vague commitments, missing evidence and unanswered
requirements, and you phrase precise questions a vendor cannot dodge.

IMPORTANT: You must output ONLY valid JSON. No explanatory text before or after the JSON."""


def create_followup_agent() -> Agent:
    """Create the Follow-up Question agent."""
    return Agent(
        role="Clarification Round Lead",
        goal="Produce the clarifying questions that most reduce evaluation uncertainty",
        backstory=FOLLOWUP_PROMPT,
        llm=get_llm(temperature=0.4),
        verbose=AGENT_VERBOSE,
        allow_delegation=False
    )


def create_followup_task(agent: Agent, requirements: str, proposal: str, vendor_name: str) -> Task:
    """Create the follow-up question task."""
    return Task(
        description=f"""Compare the vendor proposal from "{vendor_name}" against the requirements
and write 5-10 follow-up questions for the vendor.

REQUIREMENTS:
{requirements}

PROPOSAL:
{proposal}

Output a JSON object with this exact structure:
{{
    "questions": [
        {{
            "category": "technical | delivery | cost | compliance | clarification",
            "priority": "critical | high | medium | low",
            "question": "The question to send the vendor",
            "context": "What in the proposal prompted it",
            "relatedSection": "Requirement or proposal section, if any",
            "aiRationale": "Why the answer matters for the evaluation"
        }}
    ]
}}""",
        expected_output="A valid JSON object with a questions array",
        agent=agent
    )


async def generate_followup_questions(requirements: str, proposal: str, vendor_name: str) -> dict:
    """Run the follow-up agent and return its validated JSON answer."""
    agent = create_followup_agent()
    task = create_followup_task(agent, requirements, proposal, vendor_name)

    run = await run_agent_task(agent, task)
    return validate_json_output(run.raw, ["questions"])
