"""
Standards Router

Organisation compliance standards whose sections can be tagged on
requirements and proposals.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_or_404
from database.connection import get_db
from database.models import Standard


router = APIRouter(prefix="/standards", tags=["Standards"])


class StandardSection(BaseModel):
    id: str
    name: str
    description: Optional[str] = None


class StandardCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    category: str = "general"
    sections: List[StandardSection] = []
    tags: Optional[List[str]] = None


class StandardUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = None
    sections: Optional[List[StandardSection]] = None
    tags: Optional[List[str]] = None
    is_active: Optional[bool] = None


class StandardResponse(BaseModel):
    id: uuid.UUID
    name: str
    description: Optional[str] = None
    category: str
    sections: List[StandardSection] = []
    tags: Optional[List[str]] = None
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


@router.post("", response_model=StandardResponse, status_code=status.HTTP_201_CREATED)
async def create_standard(data: StandardCreate, db: AsyncSession = Depends(get_db)):
    standard = Standard(
        name=data.name.strip(),
        description=data.description,
        category=data.category,
        sections=[s.model_dump() for s in data.sections],
        tags=data.tags,
        is_active=True,
    )
    db.add(standard)
    await db.commit()
    await db.refresh(standard)
    return standard


@router.get("", response_model=List[StandardResponse])
async def list_standards(db: AsyncSession = Depends(get_db)):
    """Active standards only."""
    result = await db.execute(
        select(Standard).where(Standard.is_active.is_(True)).order_by(Standard.name)
    )
    return result.scalars().all()


@router.get("/{standard_id}", response_model=StandardResponse)
async def get_standard(standard_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    return await get_or_404(db, Standard, standard_id, "Standard")


@router.patch("/{standard_id}", response_model=StandardResponse)
async def update_standard(
    standard_id: uuid.UUID,
    data: StandardUpdate,
    db: AsyncSession = Depends(get_db)
):
    standard = await get_or_404(db, Standard, standard_id, "Standard")

    updates = data.model_dump(exclude_unset=True)
    if "sections" in updates:
        updates["sections"] = [s.model_dump() for s in data.sections or []]
    for field, value in updates.items():
        setattr(standard, field, value)

    await db.commit()
    await db.refresh(standard)
    return standard


@router.delete("/{standard_id}", response_model=StandardResponse)
async def deactivate_standard(standard_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    """Soft delete: tagged documents keep pointing at the standard."""
    standard = await get_or_404(db, Standard, standard_id, "Standard")
    standard.is_active = False
    await db.commit()
    await db.refresh(standard)
    return standard
