"""Tests for the DuckDB document and user store."""

from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path

import pytest

from timearchive.errors import ConflictError, StoreError
from timearchive.storage import DocumentRecord, DuckDBStorage, UserRecord, utcnow


def _doc(doc_id: str, embedding: list[float], *, minutes: int = 0, **kwargs) -> DocumentRecord:
    return DocumentRecord(
        id=doc_id,
        title=kwargs.get("title", doc_id),
        date=kwargs.get("date", "1969-07-20"),
        text=kwargs.get("text", f"body {doc_id}"),
        embedding=tuple(embedding),
        created_at=datetime(2024, 5, 1) + timedelta(minutes=minutes),
        source_file=kwargs.get("source_file"),
        created_by=kwargs.get("created_by"),
    )


def test_insert_and_get_document_round_trip(storage: DuckDBStorage) -> None:
    doc = _doc("doc_1", [0.25, -0.5], source_file="/tmp/a.pdf", created_by="user_1")
    storage.insert_document(doc)

    loaded = storage.get_document(doc_id="doc_1")

    assert loaded == doc
    assert storage.get_document(doc_id="missing") is None


def test_fetch_embedded_skips_empty_and_keeps_insertion_order(
    storage: DuckDBStorage,
) -> None:
    # Later insert with an earlier timestamp must still come after.
    storage.insert_document(_doc("b", [0.0, 1.0], minutes=5))
    storage.insert_document(_doc("empty", [], minutes=6))
    storage.insert_document(_doc("a", [1.0, 0.0], minutes=1))

    fetched = storage.fetch_embedded()

    assert [d.id for d in fetched] == ["b", "a"]
    assert fetched[0].embedding == (0.0, 1.0)


def test_list_documents_newest_first_with_pagination(storage: DuckDBStorage) -> None:
    for i in range(5):
        storage.insert_document(_doc(f"d{i}", [], minutes=i))

    first = storage.list_documents(page=1, limit=2)
    last = storage.list_documents(page=3, limit=2)

    assert [row["id"] for row in first] == ["d4", "d3"]
    assert [row["id"] for row in last] == ["d0"]
    assert set(first[0]) == {"id", "title", "date", "created_at"}
    assert storage.count_documents() == 5


def test_users_unique_by_email(storage: DuckDBStorage) -> None:
    user = UserRecord(
        id="user_1",
        email="ada@example.com",
        password_hash="x",
        role="editor",
        created_at=utcnow(),
    )
    storage.create_user(user)

    with pytest.raises(ConflictError):
        storage.create_user(
            UserRecord(
                id="user_2",
                email="ada@example.com",
                password_hash="y",
                role="viewer",
                created_at=utcnow(),
            )
        )

    loaded = storage.get_user_by_email("ada@example.com")
    assert loaded is not None
    assert loaded.id == "user_1"
    assert loaded.role == "editor"
    assert storage.count_users() == 1


def test_fetch_after_close_raises_store_error(tmp_path: Path) -> None:
    store = DuckDBStorage(str(tmp_path / "closed.duckdb"))
    store.close()

    with pytest.raises(StoreError) as excinfo:
        store.fetch_embedded()

    assert excinfo.value.store_kind == "unavailable"


def test_reopen_preserves_documents(tmp_path: Path) -> None:
    path = str(tmp_path / "persist.duckdb")
    store = DuckDBStorage(path)
    store.insert_document(_doc("keep", [1.0, 2.0, 3.0]))
    store.close()

    reopened = DuckDBStorage(path)
    try:
        assert [d.id for d in reopened.fetch_embedded()] == ["keep"]
    finally:
        reopened.close()
