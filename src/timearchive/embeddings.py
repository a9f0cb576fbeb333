"""
Embedding provider for document and query vectors.

Wraps the Google GenAI embedding API for batch and single-query embedding
with configurable model, dimensions, and batch size. Upstream failures are
reported as ``ProviderError`` with a small, fixed set of kinds.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Protocol

import httpx
from google.genai import Client as GenAIClient
from google.genai import errors as genai_errors
from google.genai.types import HttpOptions

from .errors import ProviderError, ProviderErrorKind

logger = logging.getLogger(__name__)

_DEFAULT_MODEL = "gemini-embedding-001"
_DEFAULT_DIM = 768
_DEFAULT_BATCH_SIZE = 50


class EmbeddingClient(Protocol):
    """What the search engine and ingestion path need from a provider."""

    def embed(self, text: str) -> list[float]:
        """Return the query embedding for *text*."""

    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        """Return one document embedding per text, in order."""


class UnconfiguredEmbeddingClient:
    """Stands in for a provider when no API key is configured."""

    def __init__(self, reason: str) -> None:
        self.reason = reason

    def embed(self, text: str) -> list[float]:
        raise ProviderError("unauthenticated", self.reason)

    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        raise ProviderError("unauthenticated", self.reason)


def _classify_status(code: int | None) -> ProviderErrorKind:
    if code in (401, 403):
        return "unauthenticated"
    if code == 429:
        return "rate_limited"
    if code is not None and 400 <= code < 500:
        return "invalid_input"
    return "network"


class EmbeddingProvider:
    """Generate text embeddings via Google GenAI."""

    def __init__(
        self,
        *,
        api_key: str | None = None,
        model: str | None = None,
        dim: int | None = None,
        batch_size: int | None = None,
        timeout_seconds: float | None = None,
        client: Any | None = None,
    ) -> None:
        self.model = model or os.getenv("TIMEARCHIVE_EMBEDDING_MODEL", _DEFAULT_MODEL)
        self.dim = dim or int(os.getenv("TIMEARCHIVE_EMBEDDING_DIM", str(_DEFAULT_DIM)))
        self.batch_size = batch_size or int(
            os.getenv("TIMEARCHIVE_EMBEDDING_BATCH_SIZE", str(_DEFAULT_BATCH_SIZE))
        )

        if client is not None:
            self._client = client
        else:
            resolved_key = api_key or os.getenv("GOOGLE_API_KEY")
            if resolved_key is None:
                raise ValueError(
                    "GOOGLE_API_KEY not found. "
                    "Provide api_key or set the environment variable."
                )
            http_options = None
            if timeout_seconds is not None:
                # HttpOptions.timeout is expressed in milliseconds.
                http_options = HttpOptions(timeout=int(timeout_seconds * 1000))
            self._client = GenAIClient(api_key=resolved_key, http_options=http_options)

    def embed_texts(
        self,
        texts: list[str],
        *,
        task_type: str = "RETRIEVAL_DOCUMENT",
    ) -> list[list[float]]:
        """Embed a list of texts in batches.

        Returns a list of embedding vectors in the same order as *texts*.
        """
        if any(not text.strip() for text in texts):
            raise ProviderError("invalid_input", "Cannot embed empty text.")

        all_embeddings: list[list[float]] = []
        for start in range(0, len(texts), self.batch_size):
            batch = texts[start : start + self.batch_size]
            result = self._embed_content(batch, task_type=task_type)
            if len(result.embeddings or []) != len(batch):
                raise ProviderError(
                    "network",
                    f"Embedding provider returned {len(result.embeddings or [])} "
                    f"vectors for {len(batch)} texts.",
                )
            for emb in result.embeddings:
                all_embeddings.append(list(emb.values))
        return all_embeddings

    def embed(self, text: str) -> list[float]:
        """Embed a single query text for retrieval."""
        if not text.strip():
            raise ProviderError("invalid_input", "Cannot embed empty text.")
        result = self._embed_content([text], task_type="RETRIEVAL_QUERY")
        if not result.embeddings:
            raise ProviderError("network", "Embedding provider returned no vectors.")
        return list(result.embeddings[0].values)

    def _embed_content(self, contents: list[str], *, task_type: str) -> Any:
        try:
            return self._client.models.embed_content(
                model=self.model,
                contents=contents,
                config={
                    "task_type": task_type,
                    "output_dimensionality": self.dim,
                },
            )
        except genai_errors.APIError as exc:
            kind = _classify_status(exc.code)
            logger.warning("Embedding request failed (%s): %s", kind, exc)
            raise ProviderError(kind, f"Embedding provider error: {exc}") from exc
        except httpx.HTTPError as exc:
            logger.warning("Embedding request failed (network): %s", exc)
            raise ProviderError("network", f"Embedding provider unreachable: {exc}") from exc
