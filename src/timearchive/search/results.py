"""
Versioned result schema returned by semantic search.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from .ranker import ScoredDocument

SEARCH_RESULT_VERSION = 1


class ScoredDocumentOut(BaseModel):
    """A document returned by semantic search, with its similarity score."""

    id: str
    title: str
    date: str
    text: str
    source_file: str | None = None
    created_by: str | None = None
    created_at: datetime
    score: float = Field(description="Cosine similarity to the query, roughly in [-1, 1]")

    @classmethod
    def from_scored(cls, item: ScoredDocument) -> "ScoredDocumentOut":
        doc = item.document
        return cls(
            id=doc.id,
            title=doc.title,
            date=doc.date,
            text=doc.text,
            source_file=doc.source_file,
            created_by=doc.created_by,
            created_at=doc.created_at,
            score=item.score,
        )


class SearchResult(BaseModel):
    """One page of ranked search results. The shape never varies."""

    version: int = SEARCH_RESULT_VERSION
    total: int = Field(description="Number of scored candidates before pagination")
    page: int
    limit: int
    results: list[ScoredDocumentOut]
