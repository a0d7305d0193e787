"""
Vendor Stages Router

The ten shortlisting milestones and each vendor's position in them.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_project_or_404
from api.middleware.error_handler import NotFoundError, ValidationError
from database.connection import get_db
from services.vendor_stages import (
    EVALUATION_COMPLETED_STAGE,
    SHORTLISTING_STAGES,
    TOTAL_STAGES,
    StageError,
    get_project_vendor_stages,
    synchronize_vendor_stages,
    update_vendor_stage,
)


router = APIRouter(tags=["Shortlisting Stages"])


class VendorStageResponse(BaseModel):
    id: uuid.UUID
    project_id: uuid.UUID
    vendor_name: str
    current_stage: int
    stage_statuses: dict
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class StageSyncRequest(BaseModel):
    evaluated_stage: int = Field(default=EVALUATION_COMPLETED_STAGE, ge=1, le=TOTAL_STAGES)
    allow_variance: bool = False


class StageUpdate(BaseModel):
    current_stage: int


@router.get("/shortlisting-stages")
async def list_shortlisting_stages():
    return SHORTLISTING_STAGES


@router.get("/projects/{project_id}/vendor-stages", response_model=List[VendorStageResponse])
async def list_vendor_stages(project_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    await get_project_or_404(db, project_id)
    return await get_project_vendor_stages(project_id, db)


@router.post("/projects/{project_id}/vendor-stages/sync")
async def sync_vendor_stages(
    project_id: uuid.UUID,
    data: Optional[StageSyncRequest] = None,
    db: AsyncSession = Depends(get_db)
):
    """Create or advance stage records for every vendor with a proposal."""
    await get_project_or_404(db, project_id)
    data = data or StageSyncRequest()
    return await synchronize_vendor_stages(
        project_id,
        db,
        evaluated_stage=data.evaluated_stage,
        allow_variance=data.allow_variance,
    )


@router.patch("/vendor-stages/{stage_id}", response_model=VendorStageResponse)
async def patch_vendor_stage(
    stage_id: uuid.UUID,
    data: StageUpdate,
    db: AsyncSession = Depends(get_db)
):
    try:
        record = await update_vendor_stage(stage_id, data.current_stage, db)
    except StageError as e:
        raise ValidationError(str(e))
    if record is None:
        raise NotFoundError(f"Vendor stage {stage_id} not found")
    return record
