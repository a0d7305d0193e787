"""
Vendor Shortlisting Stages

The ten procurement milestones a vendor moves through, and the sync that
advances every vendor of a project once its evaluation completes.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import Proposal, VendorShortlistingStage

logger = logging.getLogger("intellibid.services.vendor_stages")


SHORTLISTING_STAGES = [
    {"stage": 1, "name": "RFI Initiated", "description": "Request for Information issued to the vendor"},
    {"stage": 2, "name": "RFI Response Received", "description": "Vendor has responded to the RFI"},
    {"stage": 3, "name": "RFI Evaluation Completed", "description": "RFI response evaluated and vendor qualified"},
    {"stage": 4, "name": "RFT Initiated", "description": "Request for Tender issued to the vendor"},
    {"stage": 5, "name": "RFT Response Received", "description": "Vendor proposal received for the RFT"},
    {"stage": 6, "name": "Vendor Demo Completed", "description": "Vendor has demonstrated the solution"},
    {"stage": 7, "name": "RFT Evaluation Completed", "description": "Multi-stakeholder evaluation of the proposal completed"},
    {"stage": 8, "name": "POC Initiated", "description": "Proof of concept started with the vendor"},
    {"stage": 9, "name": "SOW Submitted", "description": "Statement of Work submitted by the vendor"},
    {"stage": 10, "name": "SOW Reviewed", "description": "Statement of Work reviewed and finalised"},
]

TOTAL_STAGES = len(SHORTLISTING_STAGES)
EVALUATION_COMPLETED_STAGE = 7

# Spread applied to demo data so vendors do not all sit on the same stage
STAGE_VARIANCE = [-1, 0, 0, 1]


class StageError(ValueError):
    """Invalid shortlisting stage."""
    pass


def build_stage_statuses(current_stage: int) -> dict[str, dict]:
    """
    Status of every stage given the vendor's current stage.

    Earlier stages are completed (dated now), the current one is in
    progress and later ones are pending.
    """
    now = datetime.now(timezone.utc).isoformat()
    statuses = {}
    for stage in range(1, TOTAL_STAGES + 1):
        if stage < current_stage:
            statuses[str(stage)] = {"status": "completed", "date": now}
        elif stage == current_stage:
            statuses[str(stage)] = {"status": "in_progress", "date": None}
        else:
            statuses[str(stage)] = {"status": "pending", "date": None}
    return statuses


def _validate_stage(stage: int) -> None:
    if not 1 <= stage <= TOTAL_STAGES:
        raise StageError(f"Stage must be between 1 and {TOTAL_STAGES}, got {stage}")


async def get_project_vendor_stages(
    project_id: uuid.UUID,
    db: AsyncSession
) -> list[VendorShortlistingStage]:
    result = await db.execute(
        select(VendorShortlistingStage)
        .where(VendorShortlistingStage.project_id == project_id)
        .order_by(VendorShortlistingStage.vendor_name)
    )
    return list(result.scalars().all())


async def synchronize_vendor_stages(
    project_id: uuid.UUID,
    db: AsyncSession,
    evaluated_stage: int = EVALUATION_COMPLETED_STAGE,
    allow_variance: bool = False
) -> dict:
    """
    Bring every vendor of a project up to the evaluated stage.

    Stage records are created for new vendors. Existing records only move
    forward, never back.

    Args:
        project_id: Project whose proposals define the vendors
        db: Database session (committed on return)
        evaluated_stage: Stage reached by evaluating the proposals
        allow_variance: Spread vendors by +/-1 stage (demo data)

    Returns:
        {"created": int, "updated": int, "vendors": [names changed]}
    """
    _validate_stage(evaluated_stage)

    result = await db.execute(
        select(Proposal.vendor_name)
        .where(Proposal.project_id == project_id)
        .order_by(Proposal.created_at)
    )
    vendor_names = list(dict.fromkeys(result.scalars().all()))

    summary = {"created": 0, "updated": 0, "vendors": []}
    if not vendor_names:
        logger.info(f"No proposals for project {project_id}, skipping vendor stage sync")
        return summary

    existing = {
        stage.vendor_name: stage
        for stage in await get_project_vendor_stages(project_id, db)
    }

    for i, vendor_name in enumerate(vendor_names):
        current_stage = evaluated_stage
        if allow_variance:
            current_stage = max(2, min(TOTAL_STAGES, evaluated_stage + STAGE_VARIANCE[i % 4]))

        record = existing.get(vendor_name)
        if record is None:
            db.add(VendorShortlistingStage(
                project_id=project_id,
                vendor_name=vendor_name,
                current_stage=current_stage,
                stage_statuses=build_stage_statuses(current_stage),
            ))
            summary["created"] += 1
            summary["vendors"].append(vendor_name)
        elif current_stage > record.current_stage:
            logger.debug(f"{vendor_name}: stage {record.current_stage} -> {current_stage}")
            record.current_stage = current_stage
            record.stage_statuses = build_stage_statuses(current_stage)
            summary["updated"] += 1
            summary["vendors"].append(vendor_name)

    await db.commit()
    logger.info(
        f"Vendor stage sync for project {project_id}: "
        f"{summary['created']} created, {summary['updated']} updated"
    )
    return summary


async def update_vendor_stage(
    stage_id: uuid.UUID,
    stage: int,
    db: AsyncSession
) -> Optional[VendorShortlistingStage]:
    """Move a vendor to an explicit stage (forwards or backwards)."""
    _validate_stage(stage)

    record = await db.get(VendorShortlistingStage, stage_id)
    if record is None:
        return None

    record.current_stage = stage
    record.stage_statuses = build_stage_statuses(stage)
    await db.commit()
    await db.refresh(record)
    return record
