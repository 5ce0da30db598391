"""
PDF helpers.
"""
import logging

import fitz  # PyMuPDF

logger = logging.getLogger(__name__)


def get_page_count(data: bytes, file_name: str) -> int:
    """
    Number of pages in an uploaded file.

    Files not named ``*.pdf`` count as 0 pages, as do PDFs that cannot be
    parsed.
    """
    if not file_name or not file_name.lower().endswith(".pdf"):
        return 0

    try:
        with fitz.open(stream=data, filetype="pdf") as doc:
            return doc.page_count
    except Exception as e:
        logger.warning(f"Could not read page count of {file_name}: {e}")
        return 0
