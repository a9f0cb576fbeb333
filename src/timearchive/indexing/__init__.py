"""Ingestion components for the archive."""

from .chunker import TextChunk, TextChunker
from .extract import extract_pdf_text, is_pdf
from .pipeline import IngestionPipeline, IngestionResult, combine_embeddings

__all__ = [
    "TextChunk",
    "TextChunker",
    "extract_pdf_text",
    "is_pdf",
    "IngestionPipeline",
    "IngestionResult",
    "combine_embeddings",
]
