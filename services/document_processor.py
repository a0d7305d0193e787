"""
Document Processor Service

Extracts text from uploaded requirement and proposal documents
(PDF, DOCX, plain text / markdown).
"""

import io
import re
from pathlib import Path

# PDF Processing
from PyPDF2 import PdfReader

# DOCX Processing
from docx import Document


SUPPORTED_EXTENSIONS = {".pdf", ".docx", ".txt", ".md"}


class UnsupportedDocumentError(ValueError):
    """Raised for file types the processor cannot read."""
    pass


class DocumentProcessor:
    """
    Extracts text from procurement documents.

    Features:
    - PDF text extraction with PyPDF2
    - DOCX paragraph and table extraction with python-docx
    - Plain text / markdown decoding
    """

    def process_bytes(self, file_bytes: bytes, filename: str) -> dict:
        """
        Process a document from bytes.

        Args:
            file_bytes: Document content as bytes
            filename: Original filename (for format detection)

        Returns:
            Dict with extracted text and metadata

        Raises:
            UnsupportedDocumentError: For unknown extensions
        """
        suffix = Path(filename).suffix.lower()

        if suffix == ".pdf":
            return self._process_pdf_bytes(file_bytes, filename)
        elif suffix == ".docx":
            return self._process_docx_bytes(file_bytes, filename)
        elif suffix in (".txt", ".md"):
            return self._process_text_bytes(file_bytes, filename)
        else:
            raise UnsupportedDocumentError(
                f"Unsupported file format: {suffix or filename}. "
                f"Supported: {', '.join(sorted(SUPPORTED_EXTENSIONS))}"
            )

    def _process_pdf_bytes(self, pdf_bytes: bytes, source: str) -> dict:
        """Process PDF from bytes."""
        result = {
            "source": source,
            "format": "pdf",
            "text": "",
            "page_count": 0,
            "warnings": []
        }

        try:
            reader = PdfReader(io.BytesIO(pdf_bytes))
            result["page_count"] = len(reader.pages)

            pages = []
            for page in reader.pages:
                pages.append(self._clean_text(page.extract_text() or ""))

            result["text"] = "\n\n".join(p for p in pages if p)

            if result["page_count"] and not result["text"]:
                result["warnings"].append(
                    "No extractable text found. The PDF may be scanned."
                )
        except Exception as e:
            result["warnings"].append(f"PDF processing error: {str(e)}")

        return result

    def _process_docx_bytes(self, docx_bytes: bytes, source: str) -> dict:
        """Process DOCX from bytes."""
        result = {
            "source": source,
            "format": "docx",
            "text": "",
            "sections": [],
            "paragraph_count": 0,
            "warnings": []
        }

        try:
            doc = Document(io.BytesIO(docx_bytes))

            paragraphs = []
            current_section = {"heading": None, "content": []}

            for para in doc.paragraphs:
                text = para.text.strip()
                if not text:
                    continue

                if para.style is not None and para.style.name.startswith("Heading"):
                    if current_section["content"]:
                        result["sections"].append(current_section)
                    current_section = {"heading": text, "content": []}
                    paragraphs.append(text)
                else:
                    current_section["content"].append(text)
                    paragraphs.append(text)

            if current_section["content"]:
                result["sections"].append(current_section)

            result["text"] = "\n\n".join(paragraphs)
            result["paragraph_count"] = len(paragraphs)

            # Requirement matrices usually live in tables
            table_text = []
            for table in doc.tables:
                for row in table.rows:
                    row_text = " | ".join(cell.text.strip() for cell in row.cells)
                    if row_text.strip(" |"):
                        table_text.append(row_text)

            if table_text:
                result["text"] += "\n\n[Table Content]\n" + "\n".join(table_text)

        except Exception as e:
            result["warnings"].append(f"DOCX processing error: {str(e)}")

        return result

    def _process_text_bytes(self, text_bytes: bytes, source: str) -> dict:
        """Decode a plain text document."""
        warnings = []
        try:
            text = text_bytes.decode("utf-8")
        except UnicodeDecodeError:
            text = text_bytes.decode("latin-1")
            warnings.append("File is not UTF-8; decoded as latin-1")

        return {
            "source": source,
            "format": "text",
            "text": text.strip(),
            "warnings": warnings
        }

    def _clean_text(self, text: str) -> str:
        """Normalize whitespace in extracted PDF text."""
        if not text:
            return ""

        text = re.sub(r'[ \t]+', ' ', text)
        text = re.sub(r'\n{3,}', '\n\n', text)

        return text.strip()


# Module-level instance for convenience
_processor = None


def get_processor() -> DocumentProcessor:
    """Get or create the document processor instance."""
    global _processor
    if _processor is None:
        _processor = DocumentProcessor()
    return _processor


def extract_text_from_bytes(file_bytes: bytes, filename: str) -> str:
    """
    Convenience function to extract text from document bytes.

    Args:
        file_bytes: Document content as bytes
        filename: Original filename

    Returns:
        Extracted text
    """
    return get_processor().process_bytes(file_bytes, filename)["text"]
