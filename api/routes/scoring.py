"""
Scoring Router

Weighted characteristic matrices per evaluation and per project, and the
questionnaire answers that feed them.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_or_404, get_project_or_404
from api.middleware.error_handler import ValidationError
from database.connection import get_db
from database.models import Evaluation, Proposal
from services.scoring import (
    calculate_characteristic_matrix,
    calculate_hybrid_score,
    calculate_vendor_questionnaire_scores,
    detect_questionnaire_type,
    rank_vendors,
)


router = APIRouter(tags=["Scoring"])


class QuestionnaireAnswer(BaseModel):
    section: Optional[str] = None
    question: Optional[str] = None
    compliance: Optional[str] = Field(
        default=None,
        description="full, partial, none, not applicable or n/a"
    )


class Questionnaire(BaseModel):
    file_name: str = Field(..., description="Name used to detect the type, e.g. 'NFR_Questionnaire.xlsx'")
    questions: List[QuestionnaireAnswer]


class QuestionnaireUpload(BaseModel):
    questionnaires: List[Questionnaire] = Field(..., min_length=1)


def _vendor_matrix(evaluation: Evaluation, proposal: Optional[Proposal]) -> dict:
    excel_scores = (proposal.excel_scores if proposal else None) or {}

    matrix = calculate_characteristic_matrix(
        {
            "functional_fit": evaluation.functional_fit,
            "technical_fit": evaluation.technical_fit,
            "delivery_risk": evaluation.delivery_risk,
            "compliance": evaluation.compliance,
            "detailed_scores": evaluation.detailed_scores or {},
        },
        excel_scores.get("characteristic_scores"),
    )
    average = excel_scores.get("average_score")
    matrix.update({
        "evaluation_id": str(evaluation.id),
        "proposal_id": str(evaluation.proposal_id),
        "vendor_name": proposal.vendor_name if proposal else "Unknown Vendor",
        "hybrid_score": calculate_hybrid_score(evaluation.overall_score, average or None),
    })
    return matrix


@router.get("/evaluations/{evaluation_id}/characteristics")
async def get_evaluation_characteristics(evaluation_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    """Characteristic matrix of one vendor."""
    evaluation = await get_or_404(db, Evaluation, evaluation_id, "Evaluation")
    proposal = await db.get(Proposal, evaluation.proposal_id)
    return _vendor_matrix(evaluation, proposal)


@router.get("/projects/{project_id}/characteristics")
async def get_project_characteristics(project_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    """Characteristic matrices of all evaluated vendors, ranked by grand total."""
    await get_project_or_404(db, project_id)

    result = await db.execute(
        select(Evaluation, Proposal)
        .outerjoin(Proposal, Proposal.id == Evaluation.proposal_id)
        .where(Evaluation.project_id == project_id)
    )
    vendors = rank_vendors([_vendor_matrix(e, p) for e, p in result.all()])
    return {"project_id": str(project_id), "vendors": vendors}


@router.post("/proposals/{proposal_id}/questionnaire-scores")
async def upload_questionnaire_scores(
    proposal_id: uuid.UUID,
    data: QuestionnaireUpload,
    db: AsyncSession = Depends(get_db)
):
    """Score a vendor's questionnaire answers and store them on the proposal."""
    proposal = await get_or_404(db, Proposal, proposal_id, "Proposal")

    unknown = [q.file_name for q in data.questionnaires if detect_questionnaire_type(q.file_name) is None]
    if len(unknown) == len(data.questionnaires):
        raise ValidationError(
            "No questionnaire type recognised; file names must mention "
            "product, nfr, cybersecurity or agile"
        )

    scores = calculate_vendor_questionnaire_scores([
        {
            "file_name": q.file_name,
            "questions": [a.model_dump() for a in q.questions],
        }
        for q in data.questionnaires
    ])

    proposal.excel_scores = scores
    await db.commit()

    return {
        "proposal_id": str(proposal_id),
        "vendor_name": proposal.vendor_name,
        "skipped": unknown,
        "scores": scores,
    }
