"""
Shared route dependencies and lookups.
"""

import uuid
from typing import Type, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from api.middleware.error_handler import NotFoundError
from database.models import Base, Project

ModelT = TypeVar("ModelT", bound=Base)


async def get_or_404(db: AsyncSession, model: Type[ModelT], obj_id: uuid.UUID, name: str) -> ModelT:
    """Load a row by primary key or raise NotFoundError."""
    obj = await db.get(model, obj_id)
    if obj is None:
        raise NotFoundError(f"{name} {obj_id} not found")
    return obj


async def get_project_or_404(db: AsyncSession, project_id: uuid.UUID) -> Project:
    return await get_or_404(db, Project, project_id, "Project")
