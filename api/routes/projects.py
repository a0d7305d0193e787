"""
Projects Router

RFT evaluation projects inside a portfolio.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_or_404, get_project_or_404
from database.connection import get_db
from database.models import Portfolio, Project, Proposal, Requirement


router = APIRouter(tags=["Projects"])


class ProjectCreate(BaseModel):
    portfolio_id: uuid.UUID
    name: str = Field(..., min_length=1, max_length=255)
    initiative_name: Optional[str] = None
    vendor_list: Optional[List[str]] = None


class ProjectResponse(BaseModel):
    id: uuid.UUID
    portfolio_id: uuid.UUID
    name: str
    initiative_name: Optional[str] = None
    vendor_list: Optional[List[str]] = None
    status: str
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class DocumentSummary(BaseModel):
    id: uuid.UUID
    file_name: str
    document_type: str
    vendor_name: Optional[str] = None

    model_config = {"from_attributes": True}


class ProjectDetailResponse(ProjectResponse):
    requirements: List[DocumentSummary] = []
    proposals: List[DocumentSummary] = []


@router.post("/projects", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(data: ProjectCreate, db: AsyncSession = Depends(get_db)):
    """Create a project; it starts in the `analyzing` state."""
    await get_or_404(db, Portfolio, data.portfolio_id, "Portfolio")

    project = Project(
        portfolio_id=data.portfolio_id,
        name=data.name.strip(),
        initiative_name=data.initiative_name,
        vendor_list=data.vendor_list,
        status="analyzing",
    )
    db.add(project)
    await db.commit()
    await db.refresh(project)
    return project


@router.get("/portfolios/{portfolio_id}/projects", response_model=List[ProjectResponse])
async def list_portfolio_projects(portfolio_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    await get_or_404(db, Portfolio, portfolio_id, "Portfolio")
    result = await db.execute(
        select(Project)
        .where(Project.portfolio_id == portfolio_id)
        .order_by(Project.created_at.desc())
    )
    return result.scalars().all()


@router.get("/projects/{project_id}", response_model=ProjectDetailResponse)
async def get_project(project_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    """Get a project with its uploaded documents."""
    project = await get_project_or_404(db, project_id)

    requirements = (await db.execute(
        select(Requirement).where(Requirement.project_id == project_id).order_by(Requirement.created_at)
    )).scalars().all()
    proposals = (await db.execute(
        select(Proposal).where(Proposal.project_id == project_id).order_by(Proposal.created_at)
    )).scalars().all()

    response = ProjectDetailResponse.model_validate(project)
    response.requirements = [DocumentSummary.model_validate(r) for r in requirements]
    response.proposals = [DocumentSummary.model_validate(p) for p in proposals]
    return response
