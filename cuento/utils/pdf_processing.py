"""
PDF inspection helpers.

    page_count: Quick page count without full extraction.
    has_pdf_magic: Cheap check that a buffer looks like a PDF.
"""

from pathlib import Path
from typing import Optional

from PyPDF2 import PdfReader

PDF_MAGIC = b"%PDF-"


def page_count(pdf_path: Path) -> Optional[int]:
    """Get page count from PDF, or None if unreadable."""
    try:
        reader = PdfReader(str(pdf_path))
        return len(reader.pages)
    except Exception:
        return None


def has_pdf_magic(buffer: bytes) -> bool:
    """True if the buffer starts with the PDF header."""
    return bytes(buffer[: len(PDF_MAGIC)]) == PDF_MAGIC
