"""
Document Ingestion Service

Stores uploaded requirement documents and vendor proposals, extracts their
text and runs the matching analysis agent to build `extracted_data`.
"""

import logging
import uuid
from pathlib import Path
from typing import Awaitable, Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from agents.proposal_analysis_agent import (
    PLACEHOLDER_VENDOR_NAMES,
    analyze_proposal,
    vendor_name_from_filename,
)
from agents.requirement_analysis_agent import analyze_requirements
from config.settings import settings
from database.models import Proposal, Requirement, Standard
from services.document_processor import get_processor

logger = logging.getLogger("intellibid.services.documents")

# Characters of raw text kept when the analysis agent fails
RAW_TEXT_LIMIT = 20000

RequirementAnalyzer = Callable[[str], Awaitable[dict]]
ProposalAnalyzer = Callable[[str, str], Awaitable[dict]]


class DocumentError(ValueError):
    """Uploaded document could not be ingested."""
    pass


def save_upload(project_id: uuid.UUID, file_name: str, content: bytes) -> Path:
    """Keep the original upload under data/uploads/{project_id}/."""
    project_dir = settings.uploads_dir / str(project_id)
    project_dir.mkdir(parents=True, exist_ok=True)

    path = project_dir / Path(file_name).name
    path.write_bytes(content)
    return path


def extract_document_text(file_name: str, content: bytes) -> str:
    """Extract text or raise DocumentError when nothing usable comes out."""
    result = get_processor().process_bytes(content, file_name)
    for warning in result.get("warnings", []):
        logger.warning(f"{file_name}: {warning}")

    text = result["text"]
    if not text.strip():
        raise DocumentError(f"No text could be extracted from {file_name}")
    return text


async def _validate_standard(
    standard_id: Optional[uuid.UUID],
    db: AsyncSession
) -> Optional[Standard]:
    if standard_id is None:
        return None
    standard = await db.get(Standard, standard_id)
    if standard is None:
        raise DocumentError(f"Standard {standard_id} not found")
    return standard


async def ingest_requirement(
    project_id: uuid.UUID,
    file_name: str,
    content: bytes,
    db: AsyncSession,
    document_type: str = "RFT",
    standard_id: Optional[uuid.UUID] = None,
    tagged_sections: Optional[list[str]] = None,
    analyzer: Optional[RequirementAnalyzer] = None
) -> Requirement:
    """
    Store a requirement document and its AI analysis.

    If the analysis agent fails, the raw text is kept instead so the
    evaluation can still run.
    """
    await _validate_standard(standard_id, db)
    text = extract_document_text(file_name, content)
    save_upload(project_id, file_name, content)

    analyze = analyzer or analyze_requirements
    try:
        extracted = await analyze(text)
    except Exception as e:
        logger.error(f"Requirement analysis failed for {file_name}: {e}")
        extracted = {"documentText": text[:RAW_TEXT_LIMIT], "analysisError": str(e)}

    requirement = Requirement(
        project_id=project_id,
        document_type=document_type or "RFT",
        file_name=file_name,
        extracted_data=extracted,
        standard_id=standard_id,
        tagged_sections=tagged_sections or None,
    )
    db.add(requirement)
    await db.commit()
    await db.refresh(requirement)

    logger.info(f"Stored requirement {file_name} for project {project_id}")
    return requirement


async def ingest_proposal(
    project_id: uuid.UUID,
    file_name: str,
    content: bytes,
    db: AsyncSession,
    standard_id: Optional[uuid.UUID] = None,
    tagged_sections: Optional[list[str]] = None,
    analyzer: Optional[ProposalAnalyzer] = None
) -> Proposal:
    """
    Store a vendor proposal and its AI analysis.

    The vendor name comes from the analysis, or from the file name when the
    analysis has none or fails.
    """
    await _validate_standard(standard_id, db)
    text = extract_document_text(file_name, content)
    save_upload(project_id, file_name, content)

    analyze = analyzer or analyze_proposal
    try:
        extracted = await analyze(text, file_name)
    except Exception as e:
        logger.error(f"Proposal analysis failed for {file_name}: {e}")
        extracted = {
            "vendorName": vendor_name_from_filename(file_name),
            "documentText": text[:RAW_TEXT_LIMIT],
            "analysisError": str(e),
        }

    vendor_name = str(extracted.get("vendorName") or "").strip()
    if vendor_name.lower() in PLACEHOLDER_VENDOR_NAMES:
        vendor_name = vendor_name_from_filename(file_name)
        extracted["vendorName"] = vendor_name

    proposal = Proposal(
        project_id=project_id,
        vendor_name=vendor_name,
        file_name=file_name,
        extracted_data=extracted,
        standard_id=standard_id,
        tagged_sections=tagged_sections or None,
    )
    db.add(proposal)
    await db.commit()
    await db.refresh(proposal)

    logger.info(f"Stored proposal {file_name} from {vendor_name} for project {project_id}")
    return proposal
