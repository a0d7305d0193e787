"""
IntelliBid - Services Package

Document processing, evaluation progress, scoring and shortlisting services.
"""

from services.document_processor import (
    DocumentProcessor,
    UnsupportedDocumentError,
    get_processor,
    extract_text_from_bytes,
)
from services.progress import (
    ProgressService,
    get_progress_service,
)
from services.scoring import (
    CHARACTERISTIC_WEIGHTS,
    calculate_characteristic_matrix,
    rank_vendors,
)
from services.vendor_stages import (
    SHORTLISTING_STAGES,
    StageError,
    synchronize_vendor_stages,
)

__all__ = [
    "DocumentProcessor",
    "UnsupportedDocumentError",
    "get_processor",
    "extract_text_from_bytes",
    "ProgressService",
    "get_progress_service",
    "CHARACTERISTIC_WEIGHTS",
    "calculate_characteristic_matrix",
    "rank_vendors",
    "SHORTLISTING_STAGES",
    "StageError",
    "synchronize_vendor_stages",
]
