"""
Process-wide service wiring.

Everything a request needs is constructed once from ``ArchiveConfig`` and
handed to the HTTP app or CLI explicitly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

from .auth import AuthService
from .config import ArchiveConfig
from .embeddings import EmbeddingClient, EmbeddingProvider, UnconfiguredEmbeddingClient
from .files import FileStore, LocalFileStore
from .indexing import IngestionPipeline, TextChunker
from .search import SemanticSearchEngine
from .storage import DuckDBStorage, StorageBackend

logger = logging.getLogger(__name__)


@dataclass
class ArchiveServices:
    config: ArchiveConfig
    storage: StorageBackend
    auth: AuthService
    ingestion: IngestionPipeline
    files: FileStore
    search_engine: SemanticSearchEngine

    def close(self) -> None:
        self.storage.close()


def build_services(
    config: ArchiveConfig,
    *,
    storage: StorageBackend | None = None,
    embedding_provider: EmbeddingClient | None = None,
) -> ArchiveServices:
    """Construct storage, provider and engines for one process."""
    if storage is None:
        storage = DuckDBStorage(config.db_path)

    if embedding_provider is None:
        try:
            embedding_provider = EmbeddingProvider(
                timeout_seconds=config.upstream_timeout_seconds
            )
        except ValueError as exc:
            logger.warning("Semantic search disabled: %s", exc)

    search_client = embedding_provider or UnconfiguredEmbeddingClient(
        "No embedding provider configured (set GOOGLE_API_KEY)"
    )

    Path(config.upload_dir).mkdir(parents=True, exist_ok=True)
    search_engine = SemanticSearchEngine(
        storage,
        search_client,
        timeout_seconds=config.upstream_timeout_seconds,
    )

    return ArchiveServices(
        config=config,
        storage=storage,
        auth=AuthService(
            storage,
            secret=config.jwt_secret,
            token_ttl=timedelta(days=config.jwt_ttl_days),
        ),
        ingestion=IngestionPipeline(
            storage,
            embedding_provider=embedding_provider,
            chunker=TextChunker(chunk_size=config.chunk_size),
        ),
        files=LocalFileStore(config.upload_dir),
        search_engine=search_engine,
    )
