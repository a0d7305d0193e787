"""
Vendor Comparison Service

Side-by-side comparison matrices of a project's vendors, saved as
snapshots and exportable as JSON or CSV.
"""

import csv
import io
import json
import logging
import uuid
from typing import Awaitable, Callable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from agents.comparison_agent import generate_vendor_comparison
from database.models import ComparisonSnapshot, Evaluation, Proposal, Requirement
from schemas.features import ComparisonMatrix
from services.evaluation_service import requirements_context

logger = logging.getLogger("intellibid.services.comparisons")

ComparisonGenerator = Callable[..., Awaitable[dict]]

CSV_HEADER = [
    "Vendor", "Overall Score", "Technical", "Delivery Risk",
    "Cost", "Compliance", "Innovation", "Team Experience"
]

EXPORT_FORMATS = {"json", "csv"}


class ComparisonError(ValueError):
    """Comparison cannot be generated or exported."""
    pass


async def _proposals_with_scores(
    project_id: uuid.UUID,
    proposal_ids: Optional[list[uuid.UUID]],
    db: AsyncSession
) -> list[dict]:
    query = (
        select(Proposal, Evaluation)
        .outerjoin(Evaluation, Evaluation.proposal_id == Proposal.id)
        .where(Proposal.project_id == project_id)
        .order_by(Proposal.created_at)
    )
    if proposal_ids:
        query = query.where(Proposal.id.in_(proposal_ids))

    vendors = []
    for proposal, evaluation in (await db.execute(query)).all():
        entry = {
            "proposalId": str(proposal.id),
            "vendorName": proposal.vendor_name,
            "proposal": proposal.extracted_data or {},
        }
        if evaluation is not None:
            entry["evaluation"] = {
                "overall": evaluation.overall_score,
                "functionalFit": evaluation.functional_fit,
                "technicalFit": evaluation.technical_fit,
                "deliveryRisk": evaluation.delivery_risk,
                "compliance": evaluation.compliance,
                "cost": evaluation.cost,
                "status": evaluation.status,
            }
        vendors.append(entry)
    return vendors


async def generate_comparison(
    project_id: uuid.UUID,
    db: AsyncSession,
    proposal_ids: Optional[list[uuid.UUID]] = None,
    comparison_type: str = "full",
    focus: Optional[str] = None,
    generator: Optional[ComparisonGenerator] = None
) -> ComparisonSnapshot:
    """
    Generate a comparison of two or more vendors and save it as a snapshot.

    Args:
        project_id: Project whose proposals are compared
        db: Database session
        proposal_ids: Restrict to these proposals (default: all)
        comparison_type: Free-form label stored with the snapshot
        focus: What the comparison should emphasise
        generator: Comparison agent call (defaults to the LLM agent)
    """
    vendors = await _proposals_with_scores(project_id, proposal_ids, db)
    if len(vendors) < 2:
        raise ComparisonError("At least two vendor proposals are needed for a comparison")

    requirements = list((await db.execute(
        select(Requirement).where(Requirement.project_id == project_id)
    )).scalars().all())

    generate = generator or generate_vendor_comparison
    data = await generate(
        requirements_context(requirements),
        json.dumps(vendors, indent=2, default=str),
        len(vendors),
        focus or "overall fit and value"
    )
    matrix = ComparisonMatrix.model_validate(data)

    # Agents do not know proposal ids; match them back by vendor name
    ids_by_vendor = {v["vendorName"].lower(): v["proposalId"] for v in vendors}
    for vendor in matrix.vendors:
        if vendor.proposal_id is None:
            vendor.proposal_id = ids_by_vendor.get(vendor.vendor_name.lower())

    snapshot = ComparisonSnapshot(
        project_id=project_id,
        title=matrix.comparison_title,
        comparison_type=comparison_type,
        vendor_ids=[v["proposalId"] for v in vendors],
        comparison_data=matrix.model_dump(by_alias=True),
        highlights={
            "executiveSummary": matrix.executive_summary,
            "topChoice": matrix.recommendations.top_choice,
            "keyDifferentiators": matrix.key_differentiators,
        },
        meta={"focus": focus, "vendorCount": len(vendors)},
    )
    db.add(snapshot)
    await db.commit()
    await db.refresh(snapshot)

    logger.info(f"Saved comparison '{snapshot.title}' of {len(vendors)} vendors")
    return snapshot


async def list_comparisons(project_id: uuid.UUID, db: AsyncSession) -> list[ComparisonSnapshot]:
    result = await db.execute(
        select(ComparisonSnapshot)
        .where(ComparisonSnapshot.project_id == project_id)
        .order_by(ComparisonSnapshot.created_at.desc())
    )
    return list(result.scalars().all())


async def get_comparison(snapshot_id: uuid.UUID, db: AsyncSession) -> Optional[ComparisonSnapshot]:
    return await db.get(ComparisonSnapshot, snapshot_id)


async def delete_comparison(snapshot_id: uuid.UUID, db: AsyncSession) -> bool:
    snapshot = await db.get(ComparisonSnapshot, snapshot_id)
    if snapshot is None:
        return False
    await db.delete(snapshot)
    await db.commit()
    return True


def comparison_to_csv(comparison_data: dict) -> str:
    """One CSV row per vendor with the dimension scores."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)

    for vendor in comparison_data.get("vendors", []):
        dimensions = vendor.get("dimensions") or {}

        def dimension(key):
            return (dimensions.get(key) or {}).get("score", 0)

        writer.writerow([
            vendor.get("vendorName", ""),
            vendor.get("overallScore", 0),
            dimension("technicalCapability"),
            dimension("deliveryRisk"),
            dimension("costCompetitiveness"),
            dimension("compliance"),
            dimension("innovation"),
            dimension("teamExperience"),
        ])

    return buffer.getvalue()


def export_comparison(snapshot: ComparisonSnapshot, export_format: str) -> tuple[str, str]:
    """
    Render a snapshot for download.

    Returns:
        (content, media type)
    """
    export_format = export_format.lower()
    if export_format not in EXPORT_FORMATS:
        raise ComparisonError(f"Unsupported export format: {export_format}")

    if export_format == "csv":
        return comparison_to_csv(snapshot.comparison_data), "text/csv"

    return json.dumps({
        "id": str(snapshot.id),
        "title": snapshot.title,
        "comparisonType": snapshot.comparison_type,
        "createdAt": snapshot.created_at.isoformat() if snapshot.created_at else None,
        "highlights": snapshot.highlights,
        "comparison": snapshot.comparison_data,
    }, indent=2), "application/json"
