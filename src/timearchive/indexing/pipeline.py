"""
Ingestion pipeline: text or uploaded file in, embedded document stored.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from ..embeddings import EmbeddingClient
from ..errors import EmbeddingUnavailable, ProviderError
from ..storage import DocumentRecord, DuckDBStorage, StorageBackend, utcnow
from .chunker import TextChunker
from .extract import extract_pdf_text, is_pdf

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IngestionResult:
    """Summary output for one ingested document."""

    document_id: str
    chunks: int
    dimensions: int

    @property
    def embedded(self) -> bool:
        return self.dimensions > 0


def combine_embeddings(
    embeddings: list[list[float]], weights: list[int]
) -> list[float]:
    """Collapse per-chunk vectors into one, weighting each by chunk length."""
    if not embeddings:
        return []
    dim = len(embeddings[0])
    if any(len(emb) != dim for emb in embeddings):
        raise ValueError("Chunk embeddings have inconsistent dimensionality")

    if not any(weights):
        weights = [1] * len(embeddings)
    combined = np.average(np.asarray(embeddings, dtype=np.float64), axis=0, weights=weights)
    return combined.tolist()


class IngestionPipeline:
    """Turn incoming text or files into stored, embedded documents."""

    def __init__(
        self,
        storage: StorageBackend,
        embedding_provider: EmbeddingClient | None = None,
        chunker: TextChunker | None = None,
    ) -> None:
        self.storage = storage
        self.embedding_provider = embedding_provider
        self.chunker = chunker or TextChunker()

    def ingest_text(
        self,
        *,
        title: str,
        date: str,
        text: str,
        created_by: str | None = None,
        source_file: str | None = None,
    ) -> IngestionResult:
        chunk_count, embedding = self._embed_document(text)
        doc = DocumentRecord(
            id=DuckDBStorage.make_document_id(),
            title=title,
            date=date,
            text=text,
            embedding=tuple(embedding),
            source_file=source_file,
            created_by=created_by,
            created_at=utcnow(),
        )
        self.storage.insert_document(doc)
        logger.info(
            "Stored document %s (chunks=%d, dim=%d)", doc.id, chunk_count, len(embedding)
        )
        return IngestionResult(
            document_id=doc.id, chunks=chunk_count, dimensions=len(embedding)
        )

    def ingest_file(
        self,
        file_path: str,
        *,
        filename: str,
        content_type: str | None = None,
        title: str | None = None,
        date: str = "",
        fallback_text: str = "",
        created_by: str | None = None,
        source_file: str | None = None,
    ) -> IngestionResult:
        """Ingest an uploaded file.

        PDFs are converted to text; any other file type is archived with the
        caller-supplied ``fallback_text``.
        """
        if is_pdf(filename, content_type):
            text = extract_pdf_text(file_path)
        else:
            text = fallback_text
        return self.ingest_text(
            title=title or filename,
            date=date,
            text=text,
            created_by=created_by,
            source_file=source_file or file_path,
        )

    def _embed_document(self, text: str) -> tuple[int, list[float]]:
        """Return (chunk count, embedding) covering the whole text."""
        chunks = self.chunker.chunk_text(text)
        if not chunks:
            return 0, []
        if self.embedding_provider is None:
            logger.warning("No embedding provider configured; storing without embedding")
            return len(chunks), []

        try:
            if len(chunks) == 1:
                return 1, self.embedding_provider.embed_texts([chunks[0].text])[0]
            embeddings = self.embedding_provider.embed_texts([c.text for c in chunks])
        except ProviderError as exc:
            raise EmbeddingUnavailable(
                f"Embedding unavailable: {exc}", provider_kind=exc.provider_kind
            ) from exc
        return len(chunks), combine_embeddings(
            embeddings, [len(c.text) for c in chunks]
        )
