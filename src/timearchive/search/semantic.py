"""
Exhaustive semantic search over the archived corpus.

Embeds the query, scans every embedded document, ranks by cosine similarity
and returns one page of results. The two upstream calls (query embedding and
corpus fetch) are each bounded by a wall-clock timeout; everything after them
is pure computation.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import TypeVar

from ..embeddings import EmbeddingClient
from ..errors import (
    CorpusUnavailable,
    EmbeddingUnavailable,
    InvalidQuery,
    ProviderError,
    StoreError,
    UpstreamTimeout,
)
from ..storage import CorpusAccessor, DocumentRecord
from .ranker import Scorer, paginate, rank_documents, score_candidates
from .results import ScoredDocumentOut, SearchResult
from .similarity import cosine_similarity

logger = logging.getLogger(__name__)

MAX_LIMIT = 100
DEFAULT_TIMEOUT_SECONDS = 30.0

T = TypeVar("T")


class SemanticSearchEngine:
    """Embed a query and rank every stored document embedding against it."""

    def __init__(
        self,
        corpus: CorpusAccessor,
        embedding_provider: EmbeddingClient,
        *,
        timeout_seconds: float | None = DEFAULT_TIMEOUT_SECONDS,
        scorer: Scorer = cosine_similarity,
    ) -> None:
        self.corpus = corpus
        self.embedding_provider = embedding_provider
        self.timeout_seconds = timeout_seconds
        self.scorer = scorer

    def search(
        self,
        query: str | None,
        *,
        page: int = 1,
        limit: int = 10,
    ) -> SearchResult:
        """Return one page of documents ranked by similarity to *query*."""
        query = self._validate(query, page=page, limit=limit)
        started = time.perf_counter()

        query_embedding = self._embed_query(query)
        candidates = self._fetch_corpus()

        scored = score_candidates(query_embedding, candidates, scorer=self.scorer)
        mismatched = sum(
            1 for doc in candidates if len(doc.embedding) != len(query_embedding)
        )
        if mismatched:
            logger.debug(
                "%d of %d candidates skipped for dimension mismatch (query dim %d)",
                mismatched,
                len(candidates),
                len(query_embedding),
            )

        ranked = rank_documents(scored)
        page_items = paginate(ranked, page=page, limit=limit)

        logger.info(
            "Search done: query_chars=%d total=%d page=%d limit=%d elapsed_ms=%.1f",
            len(query),
            len(ranked),
            page,
            limit,
            (time.perf_counter() - started) * 1000,
        )
        return SearchResult(
            total=len(ranked),
            page=page,
            limit=limit,
            results=[ScoredDocumentOut.from_scored(item) for item in page_items],
        )

    @staticmethod
    def _validate(query: str | None, *, page: int, limit: int) -> str:
        if query is None or not query.strip():
            raise InvalidQuery("Missing query")
        if page < 1:
            raise InvalidQuery(f"page must be >= 1, got {page}")
        if not 1 <= limit <= MAX_LIMIT:
            raise InvalidQuery(f"limit must be between 1 and {MAX_LIMIT}, got {limit}")
        return query

    def _embed_query(self, query: str) -> list[float]:
        try:
            return self._bounded(
                lambda: self.embedding_provider.embed(query), upstream="embedding"
            )
        except ProviderError as exc:
            logger.warning("Query embedding failed (%s): %s", exc.provider_kind, exc)
            raise EmbeddingUnavailable(
                f"Embedding unavailable: {exc}", provider_kind=exc.provider_kind
            ) from exc

    def _fetch_corpus(self) -> list[DocumentRecord]:
        try:
            documents = self._bounded(self.corpus.fetch_embedded, upstream="corpus")
        except StoreError as exc:
            logger.warning("Corpus fetch failed (%s): %s", exc.store_kind, exc)
            if exc.store_kind == "timeout":
                raise UpstreamTimeout(
                    f"Corpus fetch timed out: {exc}", upstream="corpus"
                ) from exc
            raise CorpusUnavailable(f"Corpus unavailable: {exc}") from exc
        return [doc for doc in documents if doc.is_embedded]

    def _bounded(self, call: Callable[[], T], *, upstream: str) -> T:
        if self.timeout_seconds is None:
            return call()

        executor = ThreadPoolExecutor(max_workers=1)
        try:
            future = executor.submit(call)
            try:
                return future.result(timeout=self.timeout_seconds)
            except FutureTimeoutError as exc:
                logger.warning(
                    "%s call exceeded %.1fs", upstream, self.timeout_seconds
                )
                raise UpstreamTimeout(
                    f"{upstream} call timed out after {self.timeout_seconds}s",
                    upstream=upstream,
                ) from exc
        finally:
            # Never block on a hung upstream; the worker is abandoned.
            executor.shutdown(wait=False, cancel_futures=True)
