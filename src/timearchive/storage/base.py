"""
Storage interfaces and data models for archive persistence.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Literal, Protocol, TypeAlias

Role: TypeAlias = Literal["admin", "editor", "viewer"]
ROLES: tuple[str, ...] = ("admin", "editor", "viewer")


@dataclass(frozen=True)
class DocumentRecord:
    """One archived text artifact.

    An empty ``embedding`` means the document has not been embedded and is
    excluded from semantic search.
    """

    id: str
    title: str
    date: str
    text: str
    embedding: tuple[float, ...]
    created_at: datetime
    source_file: str | None = None
    created_by: str | None = None

    @property
    def is_embedded(self) -> bool:
        return len(self.embedding) > 0


@dataclass(frozen=True)
class UserRecord:
    """A registered principal."""

    id: str
    email: str
    password_hash: str
    role: Role
    created_at: datetime


class CorpusAccessor(Protocol):
    """Read side used by the search engine."""

    def fetch_embedded(self) -> list[DocumentRecord]:
        """Return every document with a non-empty embedding, in insertion order."""


class StorageBackend(CorpusAccessor, Protocol):
    """Protocol for persistence operations used by ingestion, auth and the API."""

    def initialize(self) -> None:
        """Initialize required tables/indexes."""

    def close(self) -> None:
        """Release the underlying connection."""

    def insert_document(self, document: DocumentRecord) -> None:
        """Persist a new document."""

    def get_document(self, *, doc_id: str) -> DocumentRecord | None:
        """Get a document by id."""

    def list_documents(self, *, page: int, limit: int) -> list[dict[str, Any]]:
        """List document summaries, newest first."""

    def count_documents(self) -> int:
        """Count all stored documents."""

    def create_user(self, user: UserRecord) -> None:
        """Persist a new user; raise ``ConflictError`` on duplicate email."""

    def get_user_by_email(self, email: str) -> UserRecord | None:
        """Fetch a user by email."""

    def count_users(self) -> int:
        """Count registered users."""
