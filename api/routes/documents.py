"""
Documents Router

Multi-file upload of requirement documents and vendor proposals. Each file
is text-extracted and analysed by the matching document agent.
"""

import uuid
from pathlib import Path
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_project_or_404
from api.middleware.error_handler import ValidationError
from api.middleware.rate_limit import limiter, LIMIT_UPLOAD
from database.connection import get_db
from services.document_processor import SUPPORTED_EXTENSIONS, UnsupportedDocumentError
from services.document_service import DocumentError, ingest_proposal, ingest_requirement


router = APIRouter(prefix="/projects/{project_id}", tags=["Documents"])


class RequirementResponse(BaseModel):
    id: uuid.UUID
    project_id: uuid.UUID
    document_type: str
    file_name: str
    extracted_data: Optional[dict] = None
    standard_id: Optional[uuid.UUID] = None
    tagged_sections: Optional[List[str]] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ProposalResponse(BaseModel):
    id: uuid.UUID
    project_id: uuid.UUID
    vendor_name: str
    document_type: str
    file_name: str
    extracted_data: Optional[dict] = None
    excel_scores: Optional[dict] = None
    standard_id: Optional[uuid.UUID] = None
    tagged_sections: Optional[List[str]] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


def _parse_sections(tagged_sections: Optional[str]) -> Optional[List[str]]:
    """Comma-separated section ids from a form field."""
    if not tagged_sections:
        return None
    sections = [s.strip() for s in tagged_sections.split(",") if s.strip()]
    return sections or None


async def _read_uploads(files: List[UploadFile]) -> list[tuple[str, bytes]]:
    uploads = []
    for file in files:
        if not file.filename:
            raise ValidationError("No filename provided")
        suffix = Path(file.filename).suffix.lower()
        if suffix not in SUPPORTED_EXTENSIONS:
            raise ValidationError(
                f"Unsupported file format: {file.filename}. "
                f"Supported: {', '.join(sorted(SUPPORTED_EXTENSIONS))}"
            )
        uploads.append((file.filename, await file.read()))
    return uploads


@router.post(
    "/requirements",
    response_model=List[RequirementResponse],
    status_code=status.HTTP_201_CREATED
)
@limiter.limit(LIMIT_UPLOAD)
async def upload_requirements(
    request: Request,
    project_id: uuid.UUID,
    files: List[UploadFile] = File(...),
    document_type: str = Form("RFT"),
    standard_id: Optional[uuid.UUID] = Form(None),
    tagged_sections: Optional[str] = Form(None),
    db: AsyncSession = Depends(get_db)
):
    """Upload requirement documents (PDF, DOCX, TXT, MD)."""
    await get_project_or_404(db, project_id)
    uploads = await _read_uploads(files)

    requirements = []
    for file_name, content in uploads:
        try:
            requirements.append(await ingest_requirement(
                project_id,
                file_name,
                content,
                db,
                document_type=document_type,
                standard_id=standard_id,
                tagged_sections=_parse_sections(tagged_sections),
            ))
        except (DocumentError, UnsupportedDocumentError) as e:
            raise ValidationError(str(e))
    return requirements


@router.post(
    "/proposals",
    response_model=List[ProposalResponse],
    status_code=status.HTTP_201_CREATED
)
@limiter.limit(LIMIT_UPLOAD)
async def upload_proposals(
    request: Request,
    project_id: uuid.UUID,
    files: List[UploadFile] = File(...),
    standard_id: Optional[uuid.UUID] = Form(None),
    tagged_sections: Optional[str] = Form(None),
    db: AsyncSession = Depends(get_db)
):
    """Upload vendor proposals; the vendor name is derived per file."""
    await get_project_or_404(db, project_id)
    uploads = await _read_uploads(files)

    proposals = []
    for file_name, content in uploads:
        try:
            proposals.append(await ingest_proposal(
                project_id,
                file_name,
                content,
                db,
                standard_id=standard_id,
                tagged_sections=_parse_sections(tagged_sections),
            ))
        except (DocumentError, UnsupportedDocumentError) as e:
            raise ValidationError(str(e))
    return proposals
