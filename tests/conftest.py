from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path

import pytest

from timearchive.config import ArchiveConfig
from timearchive.errors import ProviderError, StoreError
from timearchive.storage import DocumentRecord, DuckDBStorage


class FakeEmbeddingClient:
    """Returns canned vectors and counts calls.

    Texts found in *vectors* get that vector; anything else gets *default*.
    """

    def __init__(
        self,
        vectors: dict[str, list[float]] | None = None,
        *,
        default: list[float] | None = None,
        error: ProviderError | None = None,
    ) -> None:
        self.vectors = vectors or {}
        self.default = default if default is not None else [1.0, 0.0]
        self.error = error
        self.embed_calls: list[str] = []
        self.embed_texts_calls: list[list[str]] = []

    def embed(self, text: str) -> list[float]:
        self.embed_calls.append(text)
        if self.error is not None:
            raise self.error
        return list(self.vectors.get(text, self.default))

    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        self.embed_texts_calls.append(list(texts))
        if self.error is not None:
            raise self.error
        return [list(self.vectors.get(t, self.default)) for t in texts]


class FakeCorpus:
    """In-memory corpus accessor with a call counter."""

    def __init__(
        self,
        documents: list[DocumentRecord] | None = None,
        *,
        error: StoreError | None = None,
    ) -> None:
        self.documents = documents or []
        self.error = error
        self.fetch_calls = 0

    def fetch_embedded(self) -> list[DocumentRecord]:
        self.fetch_calls += 1
        if self.error is not None:
            raise self.error
        return list(self.documents)


_BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)


def make_document(
    doc_id: str,
    embedding: list[float] | tuple[float, ...],
    *,
    title: str | None = None,
    offset: int = 0,
) -> DocumentRecord:
    return DocumentRecord(
        id=doc_id,
        title=title or f"Title {doc_id}",
        date="",
        text=f"text of {doc_id}",
        embedding=tuple(embedding),
        created_at=_BASE_TIME + timedelta(seconds=offset),
    )


@pytest.fixture()
def archive_config(tmp_path: Path) -> ArchiveConfig:
    return ArchiveConfig(
        db_path=str(tmp_path / "archive.duckdb"),
        upload_dir=str(tmp_path / "uploads"),
        jwt_secret="test-secret-with-enough-bytes-for-hs256!",
        jwt_ttl_days=7,
        upstream_timeout_seconds=5.0,
        chunk_size=8000,
        log_level="INFO",
        log_json=False,
    )


@pytest.fixture()
def storage(tmp_path: Path):
    store = DuckDBStorage(str(tmp_path / "store.duckdb"))
    yield store
    store.close()
