"""
Scoring, ranking and pagination of search candidates.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from ..storage import DocumentRecord
from .similarity import cosine_similarity

Scorer = Callable[[Sequence[float], Sequence[float]], float]


@dataclass(frozen=True)
class ScoredDocument:
    """A candidate document paired with its similarity to one query."""

    document: DocumentRecord
    score: float


def score_candidates(
    query_embedding: Sequence[float],
    candidates: Sequence[DocumentRecord],
    *,
    scorer: Scorer = cosine_similarity,
) -> list[ScoredDocument]:
    """Score every candidate against the query, keeping fetch order.

    Candidates whose dimensionality differs from the query are not compared
    and get a score of 0.0.
    """
    dim = len(query_embedding)
    scored: list[ScoredDocument] = []
    for doc in candidates:
        if len(doc.embedding) == dim:
            score = scorer(doc.embedding, query_embedding)
        else:
            score = 0.0
        scored.append(ScoredDocument(document=doc, score=score))
    return scored


def rank_documents(scored: Sequence[ScoredDocument]) -> list[ScoredDocument]:
    """Sort by score, highest first; equal scores keep their input order."""
    return sorted(scored, key=lambda item: -item.score)


def paginate(
    ranked: Sequence[ScoredDocument], *, page: int, limit: int
) -> list[ScoredDocument]:
    start = (page - 1) * limit
    if start >= len(ranked):
        return []
    return list(ranked[start : start + limit])
