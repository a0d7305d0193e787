"""
Evaluation Service

Project-level orchestration of the multi-agent evaluation: loads the
project's documents, evaluates every vendor in turn, persists evaluations,
agent metrics and criteria, then advances the vendors' shortlisting stages.
"""

import json
import logging
import uuid
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from crew.evaluation_crew import EvaluationContext, EvaluationCrew, fallback_result
from database.connection import get_session_factory
from database.models import (
    Evaluation,
    EvaluationCriteria,
    Project,
    Proposal,
    Requirement,
    Standard,
)
from schemas.evaluation import AgentResult, AgentRole, MultiAgentEvaluation
from services.agent_metrics import failed_run_evaluation_id, record_agent_results
from services.criteria import build_criteria
from services.progress import get_progress_service
from services.vendor_stages import EVALUATION_COMPLETED_STAGE, synchronize_vendor_stages

logger = logging.getLogger("intellibid.services.evaluation")


class EvaluationError(ValueError):
    """Project cannot be evaluated in its current state."""
    pass


# ============================================================================
# CONTEXT BUILDING
# ============================================================================

def requirements_context(requirements: list[Requirement]) -> str:
    """Requirement analyses as the JSON text handed to the agents."""
    documents = []
    for requirement in requirements:
        data = dict(requirement.extracted_data or {})
        # Raw text is only a stand-in for a missing analysis
        if "scope" in data:
            data.pop("documentText", None)
        documents.append({
            "documentType": requirement.document_type,
            "fileName": requirement.file_name,
            **data,
        })
    return json.dumps(documents, indent=2, default=str)


def proposal_context(proposal: Proposal) -> str:
    data = dict(proposal.extracted_data or {})
    if "technicalApproach" in data:
        data.pop("documentText", None)
    return json.dumps(data, indent=2, default=str)


async def _resolve_standard(
    proposal: Proposal,
    requirements: list[Requirement],
    db: AsyncSession
) -> tuple[Optional[str], list[dict]]:
    """
    Standard name and tagged sections ({id, name}) for a proposal.

    The proposal's own tagging wins over the requirements' tagging.
    """
    tagged = [(proposal.standard_id, proposal.tagged_sections)]
    tagged += [(r.standard_id, r.tagged_sections) for r in requirements]

    for standard_id, section_ids in tagged:
        if standard_id is None or not section_ids:
            continue
        standard = await db.get(Standard, standard_id)
        if standard is None:
            continue
        names = {str(s.get("id")): s.get("name", "") for s in (standard.sections or [])}
        sections = [
            {"id": str(section_id), "name": names.get(str(section_id), str(section_id))}
            for section_id in section_ids
        ]
        return standard.name, sections

    return None, []


# ============================================================================
# PERSISTENCE
# ============================================================================

def evaluation_from_result(
    project_id: uuid.UUID,
    proposal_id: uuid.UUID,
    result: MultiAgentEvaluation
) -> Evaluation:
    return Evaluation(
        project_id=project_id,
        proposal_id=proposal_id,
        overall_score=result.overall,
        functional_fit=result.functional_fit,
        technical_fit=result.technical_fit,
        delivery_risk=result.delivery_risk,
        cost=result.cost,
        compliance=result.compliance,
        status=result.status.value,
        ai_rationale=result.rationale,
        role_insights=result.role_insights,
        detailed_scores=result.detailed_scores,
        section_compliance=[s.model_dump(by_alias=True) for s in result.section_compliance],
        agent_diagnostics=[d.model_dump(mode="json") for d in result.agent_diagnostics],
    )


async def clear_project_evaluations(project_id: uuid.UUID, db: AsyncSession) -> None:
    """Remove earlier evaluations (and their criteria) of a project."""
    evaluation_ids = select(Evaluation.id).where(Evaluation.project_id == project_id)
    await db.execute(
        delete(EvaluationCriteria).where(EvaluationCriteria.evaluation_id.in_(evaluation_ids))
    )
    await db.execute(delete(Evaluation).where(Evaluation.project_id == project_id))
    await db.commit()


async def save_agent_metrics(
    evaluation_id: str,
    project_id: uuid.UUID,
    vendor_name: str,
    agent_results: list[AgentResult]
) -> int:
    """
    Record agent metrics on a session of their own.

    A failed metrics write rolls back only that session, so the caller's
    evaluation objects stay loaded.
    """
    async with get_session_factory()() as metrics_db:
        return await record_agent_results(metrics_db, evaluation_id, project_id, vendor_name, agent_results)


async def get_project_evaluations(project_id: uuid.UUID, db: AsyncSession) -> list[dict]:
    """Evaluations of a project, each with its vendor name."""
    result = await db.execute(
        select(Evaluation, Proposal.vendor_name)
        .outerjoin(Proposal, Proposal.id == Evaluation.proposal_id)
        .where(Evaluation.project_id == project_id)
        .order_by(Evaluation.overall_score.desc())
    )
    return [
        {"evaluation": evaluation, "vendor_name": vendor_name or "Unknown Vendor"}
        for evaluation, vendor_name in result.all()
    ]


# ============================================================================
# ORCHESTRATION
# ============================================================================

async def evaluate_project(
    project_id: uuid.UUID,
    db: AsyncSession,
    crew: Optional[EvaluationCrew] = None
) -> list[Evaluation]:
    """
    Evaluate every vendor proposal of a project.

    Vendors are evaluated one after another; the six role agents of each
    vendor run concurrently inside the crew.

    Raises:
        EvaluationError: Unknown project, or no requirements/proposals yet
    """
    project = await db.get(Project, project_id)
    if project is None:
        raise EvaluationError(f"Project {project_id} not found")

    requirements = list((await db.execute(
        select(Requirement)
        .where(Requirement.project_id == project_id)
        .order_by(Requirement.created_at)
    )).scalars().all())
    proposals = list((await db.execute(
        select(Proposal)
        .where(Proposal.project_id == project_id)
        .order_by(Proposal.created_at)
    )).scalars().all())

    if not requirements:
        raise EvaluationError("Upload at least one requirement document before analysis")
    if not proposals:
        raise EvaluationError("Upload at least one vendor proposal before analysis")

    progress = get_progress_service()
    progress.clear(str(project_id))
    crew = crew or EvaluationCrew(progress=progress)

    await clear_project_evaluations(project_id, db)

    project.status = "analyzing"
    await db.commit()

    requirements_text = requirements_context(requirements)
    evaluations = []

    logger.info(f"Evaluating {len(proposals)} proposals for project {project.name}")

    for index, proposal in enumerate(proposals):
        standard_name, tagged_sections = await _resolve_standard(proposal, requirements, db)
        context = EvaluationContext(
            project_id=str(project_id),
            vendor_name=proposal.vendor_name,
            requirements=requirements_text,
            proposal=proposal_context(proposal),
            vendor_index=index,
            total_vendors=len(proposals),
            cost_structure=(proposal.extracted_data or {}).get("costStructure"),
            standard_name=standard_name,
            tagged_sections=tagged_sections,
        )

        try:
            result, agent_results = await crew.evaluate_proposal(context)
        except Exception as e:
            logger.error(f"Evaluation of {proposal.vendor_name} failed: {e}")
            agent_results = [fallback_result(role, 0, str(e)) for role in AgentRole]
            await save_agent_metrics(
                failed_run_evaluation_id(str(project_id), proposal.vendor_name),
                project_id,
                proposal.vendor_name,
                agent_results
            )
            continue

        evaluation = evaluation_from_result(project_id, proposal.id, result)
        db.add(evaluation)
        await db.commit()
        await db.refresh(evaluation)

        await save_agent_metrics(str(evaluation.id), project_id, proposal.vendor_name, agent_results)

        db.add_all(build_criteria(evaluation.id, agent_results))
        await db.commit()

        evaluations.append(evaluation)

    await synchronize_vendor_stages(project_id, db, evaluated_stage=EVALUATION_COMPLETED_STAGE)

    project.status = "completed"
    await db.commit()

    logger.info(f"Project {project.name}: {len(evaluations)}/{len(proposals)} proposals evaluated")
    return evaluations
