"""
AI Features Router

Follow-up questions, vendor comparison snapshots and executive briefings.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import PlainTextResponse, Response
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_or_404, get_project_or_404
from api.middleware.error_handler import AgentOutputError, NotFoundError, ValidationError
from api.middleware.rate_limit import limiter, LIMIT_ANALYSIS
from database.connection import get_db
from database.models import Proposal
from schemas.features import StakeholderRole
from services import briefings, comparisons, followups


router = APIRouter(tags=["AI Features"])


# ============================================================================
# Models
# ============================================================================

class FollowupQuestionResponse(BaseModel):
    id: uuid.UUID
    project_id: uuid.UUID
    proposal_id: uuid.UUID
    category: str
    priority: str
    question: str
    context: Optional[str] = None
    related_section: Optional[str] = None
    ai_rationale: Optional[str] = None
    is_answered: bool
    answer: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class AnswerRequest(BaseModel):
    answer: str = Field(..., min_length=1)


class ComparisonRequest(BaseModel):
    proposal_ids: Optional[List[uuid.UUID]] = None
    comparison_type: str = "full"
    focus: Optional[str] = None


class ComparisonResponse(BaseModel):
    id: uuid.UUID
    project_id: uuid.UUID
    title: str
    comparison_type: str
    vendor_ids: List[str]
    comparison_data: dict
    highlights: Optional[dict] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class BriefingRequest(BaseModel):
    stakeholder_role: StakeholderRole
    briefing_type: str = "summary"


class BriefingResponse(BaseModel):
    id: uuid.UUID
    project_id: uuid.UUID
    stakeholder_role: str
    briefing_type: str
    title: str
    content: str
    key_findings: Optional[List[str]] = None
    recommendations: Optional[dict] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


# ============================================================================
# Follow-up Questions
# ============================================================================

@router.post(
    "/proposals/{proposal_id}/followup-questions",
    response_model=List[FollowupQuestionResponse],
    status_code=status.HTTP_201_CREATED
)
@limiter.limit(LIMIT_ANALYSIS)
async def generate_followup_questions(
    request: Request,
    proposal_id: uuid.UUID,
    db: AsyncSession = Depends(get_db)
):
    await get_or_404(db, Proposal, proposal_id, "Proposal")
    try:
        return await followups.generate_for_proposal(proposal_id, db)
    except followups.FollowupError as e:
        raise ValidationError(str(e))
    except ValueError as e:
        raise AgentOutputError(str(e))


@router.get("/projects/{project_id}/followup-questions", response_model=List[FollowupQuestionResponse])
async def list_project_followup_questions(
    project_id: uuid.UUID,
    proposal_id: Optional[uuid.UUID] = Query(default=None),
    db: AsyncSession = Depends(get_db)
):
    await get_project_or_404(db, project_id)
    return await followups.list_questions(db, project_id=project_id, proposal_id=proposal_id)


@router.get("/projects/{project_id}/followup-questions/summary")
async def get_followup_summary(project_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    await get_project_or_404(db, project_id)
    return await followups.questions_summary(project_id, db)


@router.patch("/followup-questions/{question_id}", response_model=FollowupQuestionResponse)
async def answer_followup_question(
    question_id: uuid.UUID,
    data: AnswerRequest,
    db: AsyncSession = Depends(get_db)
):
    question = await followups.answer_question(question_id, data.answer, db)
    if question is None:
        raise NotFoundError(f"Follow-up question {question_id} not found")
    return question


# ============================================================================
# Vendor Comparisons
# ============================================================================

@router.post(
    "/projects/{project_id}/comparisons",
    response_model=ComparisonResponse,
    status_code=status.HTTP_201_CREATED
)
@limiter.limit(LIMIT_ANALYSIS)
async def generate_comparison(
    request: Request,
    project_id: uuid.UUID,
    data: Optional[ComparisonRequest] = None,
    db: AsyncSession = Depends(get_db)
):
    await get_project_or_404(db, project_id)
    data = data or ComparisonRequest()
    try:
        return await comparisons.generate_comparison(
            project_id,
            db,
            proposal_ids=data.proposal_ids,
            comparison_type=data.comparison_type,
            focus=data.focus,
        )
    except comparisons.ComparisonError as e:
        raise ValidationError(str(e))
    except ValueError as e:
        raise AgentOutputError(str(e))


@router.get("/projects/{project_id}/comparisons", response_model=List[ComparisonResponse])
async def list_comparisons(project_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    await get_project_or_404(db, project_id)
    return await comparisons.list_comparisons(project_id, db)


@router.get("/comparisons/{snapshot_id}", response_model=ComparisonResponse)
async def get_comparison(snapshot_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    snapshot = await comparisons.get_comparison(snapshot_id, db)
    if snapshot is None:
        raise NotFoundError(f"Comparison {snapshot_id} not found")
    return snapshot


@router.delete("/comparisons/{snapshot_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_comparison(snapshot_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    if not await comparisons.delete_comparison(snapshot_id, db):
        raise NotFoundError(f"Comparison {snapshot_id} not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/comparisons/{snapshot_id}/export")
async def export_comparison(
    snapshot_id: uuid.UUID,
    format: str = Query(default="json"),
    db: AsyncSession = Depends(get_db)
):
    snapshot = await comparisons.get_comparison(snapshot_id, db)
    if snapshot is None:
        raise NotFoundError(f"Comparison {snapshot_id} not found")

    try:
        content, media_type = comparisons.export_comparison(snapshot, format)
    except comparisons.ComparisonError as e:
        raise ValidationError(str(e))

    extension = "csv" if media_type == "text/csv" else "json"
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="comparison-{snapshot_id}.{extension}"'},
    )


# ============================================================================
# Executive Briefings
# ============================================================================

@router.post(
    "/projects/{project_id}/briefings",
    response_model=BriefingResponse,
    status_code=status.HTTP_201_CREATED
)
@limiter.limit(LIMIT_ANALYSIS)
async def generate_briefing(
    request: Request,
    project_id: uuid.UUID,
    data: BriefingRequest,
    db: AsyncSession = Depends(get_db)
):
    await get_project_or_404(db, project_id)
    try:
        return await briefings.generate_briefing(
            project_id,
            data.stakeholder_role,
            db,
            briefing_type=data.briefing_type,
        )
    except briefings.BriefingError as e:
        raise ValidationError(str(e))
    except ValueError as e:
        raise AgentOutputError(str(e))


@router.get("/projects/{project_id}/briefings", response_model=List[BriefingResponse])
async def list_briefings(
    project_id: uuid.UUID,
    stakeholder_role: Optional[StakeholderRole] = Query(default=None),
    db: AsyncSession = Depends(get_db)
):
    await get_project_or_404(db, project_id)
    return await briefings.list_briefings(project_id, db, stakeholder_role=stakeholder_role)


@router.get("/briefings/{briefing_id}", response_model=BriefingResponse)
async def get_briefing(briefing_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    briefing = await briefings.get_briefing(briefing_id, db)
    if briefing is None:
        raise NotFoundError(f"Briefing {briefing_id} not found")
    return briefing


@router.delete("/briefings/{briefing_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_briefing(briefing_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    if not await briefings.delete_briefing(briefing_id, db):
        raise NotFoundError(f"Briefing {briefing_id} not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/briefings/{briefing_id}/markdown", response_class=PlainTextResponse)
async def get_briefing_markdown(briefing_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    briefing = await briefings.get_briefing(briefing_id, db)
    if briefing is None:
        raise NotFoundError(f"Briefing {briefing_id} not found")
    return PlainTextResponse(
        briefing.content,
        media_type="text/markdown",
        headers={"Content-Disposition": f'attachment; filename="briefing-{briefing_id}.md"'},
    )
