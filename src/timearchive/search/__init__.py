"""Semantic search over archived documents."""

from .ranker import ScoredDocument, paginate, rank_documents, score_candidates
from .results import SEARCH_RESULT_VERSION, ScoredDocumentOut, SearchResult
from .semantic import MAX_LIMIT, SemanticSearchEngine
from .similarity import EPSILON, cosine_similarity

__all__ = [
    "ScoredDocument",
    "paginate",
    "rank_documents",
    "score_candidates",
    "SEARCH_RESULT_VERSION",
    "ScoredDocumentOut",
    "SearchResult",
    "MAX_LIMIT",
    "SemanticSearchEngine",
    "EPSILON",
    "cosine_similarity",
]
