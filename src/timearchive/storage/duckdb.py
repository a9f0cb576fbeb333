"""
DuckDB storage backend for documents and users.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import duckdb

from ..errors import ConflictError, StoreError
from .base import DocumentRecord, UserRecord

logger = logging.getLogger(__name__)

_DOCUMENT_COLUMNS = (
    "id, title, date, text, embedding, source_file, created_by, created_at"
)


def _new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex}"


def utcnow() -> datetime:
    """Naive UTC timestamp, as stored in DuckDB ``TIMESTAMP`` columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class DuckDBStorage:
    """DuckDB-backed persistence for archived documents and users."""

    def __init__(
        self,
        db_path: str,
        *,
        read_only: bool = False,
        initialize: bool = True,
    ) -> None:
        self.db_path = str(Path(db_path).expanduser().resolve())
        self.read_only = read_only
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = duckdb.connect(self.db_path, read_only=read_only)
        if initialize and not read_only:
            self.initialize()

    def close(self) -> None:
        """Close the underlying DuckDB connection."""
        self._conn.close()

    def _cursor(self) -> duckdb.DuckDBPyConnection:
        # Each call gets its own cursor so request threads do not share one.
        return self._conn.cursor()

    def initialize(self) -> None:
        with self._cursor() as cur:
            cur.execute("CREATE SEQUENCE IF NOT EXISTS documents_seq START 1;")
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS users (
                    id VARCHAR PRIMARY KEY,
                    email VARCHAR NOT NULL UNIQUE,
                    password_hash VARCHAR NOT NULL,
                    role VARCHAR NOT NULL DEFAULT 'editor',
                    created_at TIMESTAMP NOT NULL
                );
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS documents (
                    id VARCHAR PRIMARY KEY,
                    seq BIGINT NOT NULL DEFAULT nextval('documents_seq'),
                    title VARCHAR NOT NULL DEFAULT '',
                    date VARCHAR NOT NULL DEFAULT '',
                    text VARCHAR NOT NULL DEFAULT '',
                    embedding DOUBLE[] NOT NULL,
                    source_file VARCHAR,
                    created_by VARCHAR,
                    created_at TIMESTAMP NOT NULL
                );
                """
            )
            cur.execute(
                "CREATE INDEX IF NOT EXISTS documents_created_at_idx "
                "ON documents (created_at);"
            )

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    @staticmethod
    def make_document_id() -> str:
        return _new_id("doc")

    def insert_document(self, document: DocumentRecord) -> None:
        with self._cursor() as cur:
            cur.execute(
                """
                INSERT INTO documents (
                    id, title, date, text, embedding, source_file, created_by, created_at
                )
                VALUES (?, ?, ?, ?, CAST(? AS DOUBLE[]), ?, ?, ?)
                """,
                [
                    document.id,
                    document.title,
                    document.date,
                    document.text,
                    list(document.embedding),
                    document.source_file,
                    document.created_by,
                    document.created_at,
                ],
            )

    def get_document(self, *, doc_id: str) -> DocumentRecord | None:
        with self._cursor() as cur:
            row = cur.execute(
                f"SELECT {_DOCUMENT_COLUMNS} FROM documents WHERE id = ? LIMIT 1",
                [doc_id],
            ).fetchone()
        if row is None:
            return None
        return self._row_to_document(row)

    def list_documents(self, *, page: int, limit: int) -> list[dict[str, Any]]:
        offset = (page - 1) * limit
        with self._cursor() as cur:
            rows = cur.execute(
                """
                SELECT id, title, date, created_at
                FROM documents
                ORDER BY created_at DESC, seq DESC
                LIMIT ? OFFSET ?
                """,
                [limit, offset],
            ).fetchall()
        return [
            {
                "id": str(row[0]),
                "title": str(row[1]),
                "date": str(row[2]),
                "created_at": row[3],
            }
            for row in rows
        ]

    def count_documents(self) -> int:
        with self._cursor() as cur:
            row = cur.execute("SELECT COUNT(*) FROM documents").fetchone()
        return int(row[0]) if row else 0

    def fetch_embedded(self) -> list[DocumentRecord]:
        """Return all documents that carry an embedding, oldest first."""
        try:
            with self._cursor() as cur:
                rows = cur.execute(
                    f"""
                    SELECT {_DOCUMENT_COLUMNS}
                    FROM documents
                    WHERE len(embedding) > 0
                    ORDER BY seq ASC
                    """
                ).fetchall()
        except duckdb.Error as exc:
            logger.warning("Corpus fetch failed: %s", exc)
            raise StoreError("unavailable", f"Document store unavailable: {exc}") from exc
        return [self._row_to_document(row) for row in rows]

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    @staticmethod
    def make_user_id() -> str:
        return _new_id("user")

    def create_user(self, user: UserRecord) -> None:
        try:
            with self._cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO users (id, email, password_hash, role, created_at)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    [user.id, user.email, user.password_hash, user.role, user.created_at],
                )
        except duckdb.ConstraintException as exc:
            raise ConflictError("Email already registered") from exc

    def get_user_by_email(self, email: str) -> UserRecord | None:
        with self._cursor() as cur:
            row = cur.execute(
                """
                SELECT id, email, password_hash, role, created_at
                FROM users
                WHERE email = ?
                LIMIT 1
                """,
                [email],
            ).fetchone()
        if row is None:
            return None
        return UserRecord(
            id=str(row[0]),
            email=str(row[1]),
            password_hash=str(row[2]),
            role=row[3],
            created_at=row[4],
        )

    def count_users(self) -> int:
        with self._cursor() as cur:
            row = cur.execute("SELECT COUNT(*) FROM users").fetchone()
        return int(row[0]) if row else 0

    @staticmethod
    def _row_to_document(row: tuple[Any, ...]) -> DocumentRecord:
        return DocumentRecord(
            id=str(row[0]),
            title=str(row[1]),
            date=str(row[2]),
            text=str(row[3]),
            embedding=tuple(float(v) for v in (row[4] or ())),
            source_file=row[5],
            created_by=row[6],
            created_at=row[7],
        )
