"""
Evaluations Router

Runs the multi-agent evaluation (in-process or queued), serves the stored
evaluations and streams live agent progress over server-sent events.
"""

import asyncio
import logging
import uuid
from datetime import datetime
from typing import Any, AsyncIterator, List, Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import StreamingResponse
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_or_404, get_project_or_404
from api.middleware.error_handler import ConflictError, NotFoundError, ValidationError
from api.middleware.rate_limit import limiter, LIMIT_ANALYSIS
from database.connection import get_db
from database.models import Evaluation, Proposal
from schemas.evaluation import ProgressUpdate
from services.evaluation_service import EvaluationError, evaluate_project, get_project_evaluations
from services.progress import get_progress_service
from workers.queue import JobNotCancellableError, cancel_job, enqueue_evaluation_job, get_job_status

logger = logging.getLogger("intellibid.api.evaluations")

router = APIRouter(tags=["Evaluations"])

HEARTBEAT_SECONDS = 15.0


# ============================================================================
# Response Models
# ============================================================================

class EvaluationResponse(BaseModel):
    id: uuid.UUID
    project_id: uuid.UUID
    proposal_id: uuid.UUID
    vendor_name: str = "Unknown Vendor"
    overall_score: int
    functional_fit: int
    technical_fit: int
    delivery_risk: int
    cost: str
    compliance: int
    status: str
    ai_rationale: Optional[str] = None
    role_insights: Optional[dict] = None
    detailed_scores: Optional[dict] = None
    section_compliance: Optional[List[dict]] = None
    agent_diagnostics: Optional[List[dict]] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class AnalyzeResponse(BaseModel):
    project_id: uuid.UUID
    status: str
    evaluations: List[EvaluationResponse]


class JobResponse(BaseModel):
    job_id: str
    project_id: str
    status: str


class ProgressSnapshot(BaseModel):
    project_id: str
    updates: List[ProgressUpdate]


def to_response(evaluation: Evaluation, vendor_name: Optional[str]) -> EvaluationResponse:
    response = EvaluationResponse.model_validate(evaluation)
    response.vendor_name = vendor_name or "Unknown Vendor"
    return response


# ============================================================================
# Evaluation Endpoints
# ============================================================================

@router.post("/projects/{project_id}/analyze", response_model=AnalyzeResponse)
@limiter.limit(LIMIT_ANALYSIS)
async def analyze_project(
    request: Request,
    project_id: uuid.UUID,
    db: AsyncSession = Depends(get_db)
):
    """
    Evaluate every proposal of the project with the six role agents.

    Runs in this process so the progress stream of the same server sees
    every agent update.
    """
    await get_project_or_404(db, project_id)

    try:
        await evaluate_project(project_id, db)
    except EvaluationError as e:
        raise ValidationError(str(e))

    evaluations = await get_project_evaluations(project_id, db)
    return AnalyzeResponse(
        project_id=project_id,
        status="completed",
        evaluations=[to_response(e["evaluation"], e["vendor_name"]) for e in evaluations],
    )


@router.post(
    "/projects/{project_id}/analyze/async",
    response_model=JobResponse,
    status_code=status.HTTP_202_ACCEPTED
)
@limiter.limit(LIMIT_ANALYSIS)
async def analyze_project_async(
    request: Request,
    project_id: uuid.UUID,
    db: AsyncSession = Depends(get_db)
):
    """Queue the evaluation on the ARQ worker; poll /jobs/{job_id}."""
    await get_project_or_404(db, project_id)
    job_id = await enqueue_evaluation_job(str(project_id))
    logger.info(f"Queued evaluation job {job_id} for project {project_id}")
    return JobResponse(job_id=job_id, project_id=str(project_id), status="queued")


@router.get("/jobs/{job_id}")
async def get_job(job_id: str) -> dict[str, Any]:
    job = await get_job_status(job_id)
    if job is None:
        raise NotFoundError(f"Job {job_id} not found")
    return job


@router.delete("/jobs/{job_id}")
async def cancel_evaluation_job(job_id: str):
    """
    Cancel a queued evaluation job.

    The worker checks for cancellation only before it starts, so running
    and finished jobs cannot be cancelled (409).
    """
    try:
        cancelled = await cancel_job(job_id)
    except JobNotCancellableError as e:
        raise ConflictError(str(e))
    if not cancelled:
        raise NotFoundError(f"Job {job_id} not found")
    return {"job_id": job_id, "status": "cancelled"}


@router.get("/projects/{project_id}/evaluations", response_model=List[EvaluationResponse])
async def list_project_evaluations(project_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    await get_project_or_404(db, project_id)
    evaluations = await get_project_evaluations(project_id, db)
    return [to_response(e["evaluation"], e["vendor_name"]) for e in evaluations]


@router.get("/evaluations/{evaluation_id}", response_model=EvaluationResponse)
async def get_evaluation(evaluation_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    evaluation = await get_or_404(db, Evaluation, evaluation_id, "Evaluation")
    proposal = await db.get(Proposal, evaluation.proposal_id)
    return to_response(evaluation, proposal.vendor_name if proposal else None)


# ============================================================================
# Progress
# ============================================================================

def format_event(update: ProgressUpdate) -> str:
    return f"data: {update.model_dump_json()}\n\n"


async def progress_event_stream(
    project_id: str,
    request: Request,
    heartbeat: float = HEARTBEAT_SECONDS
) -> AsyncIterator[str]:
    """
    Yield SSE frames for a project until the client disconnects.

    The current snapshot is replayed first; a comment line is sent whenever
    no update arrived within `heartbeat` seconds.
    """
    queue: asyncio.Queue[ProgressUpdate] = asyncio.Queue()
    unsubscribe = get_progress_service().subscribe(project_id, queue.put_nowait)

    try:
        yield ": connected\n\n"
        while not await request.is_disconnected():
            try:
                update = await asyncio.wait_for(queue.get(), timeout=heartbeat)
            except asyncio.TimeoutError:
                yield ": heartbeat\n\n"
                continue
            yield format_event(update)
    finally:
        unsubscribe()
        logger.debug(f"Progress stream closed for project {project_id}")


@router.get("/projects/{project_id}/evaluation-progress")
async def stream_evaluation_progress(project_id: uuid.UUID, request: Request):
    """Live agent progress as text/event-stream."""
    return StreamingResponse(
        progress_event_stream(str(project_id), request),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


@router.get("/projects/{project_id}/evaluation-progress/snapshot", response_model=ProgressSnapshot)
async def get_evaluation_progress(project_id: uuid.UUID):
    """Current agent progress as JSON, for clients that poll."""
    return ProgressSnapshot(
        project_id=str(project_id),
        updates=get_progress_service().get_progress(str(project_id)),
    )
