"""
Executive Briefing Service

Stakeholder-specific briefings (CEO, CTO, CFO, CISO, COO, project manager)
written from a project's evaluations and stored as markdown.
"""

import json
import logging
import uuid
from typing import Awaitable, Callable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from agents.briefing_agent import generate_executive_briefing
from database.models import ExecutiveBriefing, Project, Proposal
from schemas.features import BriefingContent, StakeholderRole
from services.evaluation_service import get_project_evaluations

logger = logging.getLogger("intellibid.services.briefings")

BriefingGenerator = Callable[[str, str, str, str], Awaitable[dict]]


class BriefingError(ValueError):
    """Briefing cannot be generated."""
    pass


def format_briefing_as_markdown(content: BriefingContent) -> str:
    lines = [f"# {content.top_recommendation}", "", "## Key Findings", ""]
    lines += [f"{i}. {finding}" for i, finding in enumerate(content.key_findings, 1)]

    lines += ["", "## Risk Summary", "", "### Risks", ""]
    lines += [f"- {risk}" for risk in content.risk_summary.risks]
    lines += ["", "### Mitigations", ""]
    lines += [f"- {mitigation}" for mitigation in content.risk_summary.mitigations]

    lines += ["", "## Next Steps", ""]
    lines += [f"{i}. {step}" for i, step in enumerate(content.next_steps, 1)]

    return "\n".join(lines) + "\n"


def briefing_title(stakeholder_role: StakeholderRole) -> str:
    return f"Executive Briefing for {stakeholder_role.value}"


async def generate_briefing(
    project_id: uuid.UUID,
    stakeholder_role: StakeholderRole,
    db: AsyncSession,
    briefing_type: str = "summary",
    generator: Optional[BriefingGenerator] = None
) -> ExecutiveBriefing:
    """Generate and store a briefing; the project must have evaluations."""
    project = await db.get(Project, project_id)
    if project is None:
        raise BriefingError(f"Project {project_id} not found")

    evaluations = await get_project_evaluations(project_id, db)
    if not evaluations:
        raise BriefingError("Run the evaluation before generating a briefing")

    evaluations_text = json.dumps([
        {
            "vendorName": entry["vendor_name"],
            "overall": entry["evaluation"].overall_score,
            "functionalFit": entry["evaluation"].functional_fit,
            "technicalFit": entry["evaluation"].technical_fit,
            "deliveryRisk": entry["evaluation"].delivery_risk,
            "compliance": entry["evaluation"].compliance,
            "cost": entry["evaluation"].cost,
            "status": entry["evaluation"].status,
            "rationale": entry["evaluation"].ai_rationale,
        }
        for entry in evaluations
    ], indent=2)

    proposals = (await db.execute(
        select(Proposal).where(Proposal.project_id == project_id)
    )).scalars().all()
    proposals_text = json.dumps(
        [{"vendorName": p.vendor_name, **(p.extracted_data or {})} for p in proposals],
        indent=2,
        default=str
    )

    generate = generator or generate_executive_briefing
    data = await generate(stakeholder_role.value, project.name, evaluations_text, proposals_text)
    content = BriefingContent.model_validate(data)

    briefing = ExecutiveBriefing(
        project_id=project_id,
        stakeholder_role=stakeholder_role.value,
        briefing_type=briefing_type,
        title=briefing_title(stakeholder_role),
        content=format_briefing_as_markdown(content),
        key_findings=content.key_findings,
        recommendations={
            "topRecommendation": content.top_recommendation,
            "nextSteps": content.next_steps,
            "riskSummary": content.risk_summary.model_dump(),
        },
        meta={"vendorCount": len(evaluations)},
    )
    db.add(briefing)
    await db.commit()
    await db.refresh(briefing)

    logger.info(f"Saved {stakeholder_role.value} briefing for project {project.name}")
    return briefing


async def list_briefings(
    project_id: uuid.UUID,
    db: AsyncSession,
    stakeholder_role: Optional[StakeholderRole] = None
) -> list[ExecutiveBriefing]:
    query = select(ExecutiveBriefing).where(ExecutiveBriefing.project_id == project_id)
    if stakeholder_role is not None:
        query = query.where(ExecutiveBriefing.stakeholder_role == stakeholder_role.value)
    result = await db.execute(query.order_by(ExecutiveBriefing.created_at.desc()))
    return list(result.scalars().all())


async def get_briefing(briefing_id: uuid.UUID, db: AsyncSession) -> Optional[ExecutiveBriefing]:
    return await db.get(ExecutiveBriefing, briefing_id)


async def delete_briefing(briefing_id: uuid.UUID, db: AsyncSession) -> bool:
    briefing = await db.get(ExecutiveBriefing, briefing_id)
    if briefing is None:
        return False
    await db.delete(briefing)
    await db.commit()
    return True
