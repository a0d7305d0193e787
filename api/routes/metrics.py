"""
Agent Metrics Router

Analytics over role agent executions: per-role performance, per-evaluation
breakdowns, failures, time series and per-project totals.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from api.middleware.error_handler import NotFoundError
from config.settings import settings
from database.connection import get_db
from schemas.evaluation import AgentRole
from services import agent_metrics


router = APIRouter(prefix="/agent-metrics", tags=["Agent Metrics"])


class AgentFailureResponse(BaseModel):
    id: uuid.UUID
    evaluation_id: str
    project_id: uuid.UUID
    vendor_name: str
    agent_role: str
    execution_time_ms: int
    error_type: Optional[str] = None
    error_message: Optional[str] = None
    timestamp: Optional[datetime] = None

    model_config = {"from_attributes": True}


@router.get("/summary")
async def get_summary(db: AsyncSession = Depends(get_db)):
    return await agent_metrics.get_summary_stats(db)


@router.get("/agents")
async def get_all_agents(db: AsyncSession = Depends(get_db)):
    return await agent_metrics.get_all_agent_stats(db)


@router.get("/agents/{agent_role}")
async def get_agent(agent_role: AgentRole, db: AsyncSession = Depends(get_db)):
    stats = await agent_metrics.get_agent_stats(agent_role.value, db)
    if stats is None:
        raise NotFoundError(f"No recent executions for agent {agent_role.value}")
    return stats


@router.get("/evaluations/{evaluation_id}")
async def get_evaluation(evaluation_id: str, db: AsyncSession = Depends(get_db)):
    metrics = await agent_metrics.get_evaluation_metrics(evaluation_id, db)
    if metrics is None:
        raise NotFoundError(f"No metrics for evaluation {evaluation_id}")
    return metrics


@router.get("/failures", response_model=List[AgentFailureResponse])
async def get_failures(
    limit: int = Query(default=10, ge=1, le=100),
    db: AsyncSession = Depends(get_db)
):
    return await agent_metrics.get_recent_failures(db, limit=limit)


@router.get("/time-series")
async def get_time_series(
    limit: int = Query(default=50, ge=1, le=500),
    db: AsyncSession = Depends(get_db)
):
    return await agent_metrics.get_time_series_data(db, limit=limit)


@router.get("/projects")
async def get_projects(db: AsyncSession = Depends(get_db)):
    return await agent_metrics.get_project_metrics(db)


@router.delete("/old")
async def delete_old_metrics(
    days: int = Query(default=settings.metrics_retention_days, ge=1),
    db: AsyncSession = Depends(get_db)
):
    deleted = await agent_metrics.clear_old_metrics(db, days_to_keep=days)
    return {"deleted": deleted, "days_kept": days}
