"""Storage backends for the archive."""

from .base import ROLES, CorpusAccessor, DocumentRecord, Role, StorageBackend, UserRecord
from .duckdb import DuckDBStorage, utcnow

__all__ = [
    "ROLES",
    "CorpusAccessor",
    "DocumentRecord",
    "Role",
    "StorageBackend",
    "UserRecord",
    "DuckDBStorage",
    "utcnow",
]
