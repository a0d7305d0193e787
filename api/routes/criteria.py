"""
Evaluation Criteria Router

Per-role criteria of an evaluation and reviewer re-scoring.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_or_404
from api.middleware.error_handler import NotFoundError, ValidationError
from database.connection import get_db
from database.models import Evaluation
from schemas.evaluation import AgentRole
from services.criteria import (
    SCORE_OPTIONS,
    CriteriaError,
    criteria_summary,
    list_criteria,
    update_criterion_score,
)


router = APIRouter(tags=["Evaluation Criteria"])


class CriterionResponse(BaseModel):
    id: uuid.UUID
    evaluation_id: uuid.UUID
    role: str
    section: str
    question: str
    score: int
    score_label: str

    model_config = {"from_attributes": True}


class CriterionUpdate(BaseModel):
    score: int


@router.get("/criteria/score-options")
async def get_score_options():
    return [{"score": score, "label": label} for score, label in SCORE_OPTIONS.items()]


@router.get("/evaluations/{evaluation_id}/criteria", response_model=List[CriterionResponse])
async def get_evaluation_criteria(
    evaluation_id: uuid.UUID,
    role: Optional[AgentRole] = Query(default=None),
    db: AsyncSession = Depends(get_db)
):
    await get_or_404(db, Evaluation, evaluation_id, "Evaluation")
    return await list_criteria(evaluation_id, db, role=role.value if role else None)


@router.get("/evaluations/{evaluation_id}/criteria/summary")
async def get_criteria_summary(evaluation_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    await get_or_404(db, Evaluation, evaluation_id, "Evaluation")
    return await criteria_summary(evaluation_id, db)


@router.patch("/evaluation-criteria/{criterion_id}", response_model=CriterionResponse)
async def patch_criterion(
    criterion_id: uuid.UUID,
    data: CriterionUpdate,
    db: AsyncSession = Depends(get_db)
):
    """Re-score a criterion; the label follows the score."""
    try:
        criterion = await update_criterion_score(criterion_id, data.score, db)
    except CriteriaError as e:
        raise ValidationError(str(e))
    if criterion is None:
        raise NotFoundError(f"Criterion {criterion_id} not found")
    return criterion
