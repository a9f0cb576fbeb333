"""Tests for candidate scoring, ranking and pagination."""

from __future__ import annotations

from conftest import make_document

from timearchive.search import paginate, rank_documents, score_candidates
from timearchive.search.ranker import ScoredDocument


def test_mismatched_dimensions_score_zero_without_calling_scorer() -> None:
    calls: list[tuple] = []

    def scorer(a, b) -> float:
        calls.append((tuple(a), tuple(b)))
        return 0.5

    docs = [
        make_document("same", [1.0, 0.0]),
        make_document("longer", [1.0, 0.0, 0.0]),
        make_document("shorter", [1.0]),
    ]

    scored = score_candidates([1.0, 0.0], docs, scorer=scorer)

    assert [s.score for s in scored] == [0.5, 0.0, 0.0]
    assert calls == [((1.0, 0.0), (1.0, 0.0))]


def test_rank_is_stable_for_ties() -> None:
    docs = [make_document(f"d{i}", [1.0]) for i in range(5)]
    scored = [
        ScoredDocument(document=docs[0], score=0.2),
        ScoredDocument(document=docs[1], score=0.9),
        ScoredDocument(document=docs[2], score=0.2),
        ScoredDocument(document=docs[3], score=0.9),
        ScoredDocument(document=docs[4], score=-0.5),
    ]

    ranked = rank_documents(scored)

    assert [r.document.id for r in ranked] == ["d1", "d3", "d0", "d2", "d4"]


def test_paginate_clips_last_page() -> None:
    docs = [make_document(f"d{i}", [1.0]) for i in range(5)]
    ranked = [ScoredDocument(document=d, score=1.0) for d in docs]

    assert [r.document.id for r in paginate(ranked, page=1, limit=2)] == ["d0", "d1"]
    assert [r.document.id for r in paginate(ranked, page=3, limit=2)] == ["d4"]
    assert paginate(ranked, page=4, limit=2) == []


def test_paginate_empty_input() -> None:
    assert paginate([], page=1, limit=10) == []
