"""
Text extraction for uploaded documents.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any

from ..errors import IngestionError

logger = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"


def is_pdf(filename: str, content_type: str | None = None) -> bool:
    return content_type == PDF_MIME_TYPE or filename.lower().endswith(".pdf")


@lru_cache(maxsize=1)
def _converter() -> Any:
    # Docling loads layout models on import; defer until the first PDF.
    from docling.document_converter import DocumentConverter

    return DocumentConverter()


def extract_pdf_text(file_path: str) -> str:
    """Convert a PDF to plain markdown text with Docling."""
    path = Path(file_path)
    if not path.is_file():
        raise IngestionError(f"No such file: {file_path}")
    try:
        result = _converter().convert(str(path))
        text = result.document.export_to_markdown()
    except Exception as exc:
        logger.warning("PDF extraction failed for %s: %s", path.name, exc)
        raise IngestionError(f"Error parsing {path.name}: {exc}") from exc
    return text or ""
