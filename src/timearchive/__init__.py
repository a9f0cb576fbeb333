"""
TimeArchive - document archive with embedding-based semantic search.

Documents (typed text or uploaded PDFs) are embedded once at ingestion time
with Google GenAI and stored in DuckDB. Search embeds the query, scans every
embedded document, and ranks by cosine similarity.

Example usage:
    >>> from timearchive import load_config, build_services
    >>> services = build_services(load_config())
    >>> page = services.search_engine.search("treaty signing", limit=5)
"""

from .config import ArchiveConfig, load_config
from .embeddings import EmbeddingProvider
from .indexing import IngestionPipeline, IngestionResult
from .search import ScoredDocument, SearchResult, SemanticSearchEngine, cosine_similarity
from .services import ArchiveServices, build_services
from .storage import DocumentRecord, DuckDBStorage

__all__ = [
    # Configuration
    "ArchiveConfig",
    "load_config",
    "ArchiveServices",
    "build_services",
    # Search
    "SemanticSearchEngine",
    "SearchResult",
    "ScoredDocument",
    "cosine_similarity",
    # Ingestion and storage
    "EmbeddingProvider",
    "IngestionPipeline",
    "IngestionResult",
    "DocumentRecord",
    "DuckDBStorage",
]
