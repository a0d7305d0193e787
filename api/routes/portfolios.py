"""
Portfolios Router

Business portfolios (e.g. Flight Operations) that group RFT projects.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from api.dependencies import get_or_404
from api.middleware.error_handler import ConflictError
from database.connection import get_db
from database.models import Portfolio
from api.routes.projects import ProjectResponse
from services.seed import seed_portfolios


router = APIRouter(prefix="/portfolios", tags=["Portfolios"])


# ============================================================================
# Request/Response Models
# ============================================================================

class PortfolioCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None


class PortfolioResponse(BaseModel):
    id: uuid.UUID
    name: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class PortfolioDetailResponse(PortfolioResponse):
    projects: List[ProjectResponse] = []


# ============================================================================
# Endpoints
# ============================================================================

@router.post("", response_model=PortfolioResponse, status_code=status.HTTP_201_CREATED)
async def create_portfolio(data: PortfolioCreate, db: AsyncSession = Depends(get_db)):
    """Create a portfolio; names are unique."""
    name = data.name.strip()
    existing = await db.execute(select(Portfolio).where(Portfolio.name == name))
    if existing.scalar_one_or_none() is not None:
        raise ConflictError(f"Portfolio '{name}' already exists")

    portfolio = Portfolio(name=name, description=data.description)
    db.add(portfolio)
    await db.commit()
    await db.refresh(portfolio)
    return portfolio


@router.get("", response_model=List[PortfolioResponse])
async def list_portfolios(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Portfolio).order_by(Portfolio.name))
    return result.scalars().all()


@router.get("/{portfolio_id}", response_model=PortfolioDetailResponse)
async def get_portfolio(portfolio_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    """Get a portfolio with its projects."""
    result = await db.execute(
        select(Portfolio)
        .options(selectinload(Portfolio.projects))
        .where(Portfolio.id == portfolio_id)
    )
    portfolio = result.scalar_one_or_none()
    if portfolio is None:
        await get_or_404(db, Portfolio, portfolio_id, "Portfolio")
    return portfolio


@router.post("/seed", response_model=List[PortfolioResponse])
async def seed_default_portfolios(db: AsyncSession = Depends(get_db)):
    """Create the default airline portfolios that are missing; returns all portfolios."""
    await seed_portfolios(db)
    return await list_portfolios(db)
