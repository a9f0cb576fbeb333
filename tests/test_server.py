"""Tests for the REST endpoints."""

from __future__ import annotations

from pathlib import Path

import pytest
from conftest import FakeEmbeddingClient
from fastapi.testclient import TestClient

import timearchive.indexing.pipeline as pipeline_module
from timearchive.config import ArchiveConfig
from timearchive.errors import ProviderError
from timearchive.server import create_app
from timearchive.services import ArchiveServices, build_services


@pytest.fixture()
def embedder() -> FakeEmbeddingClient:
    return FakeEmbeddingClient(
        {
            "The Berlin wall fell.": [1.0, 0.0],
            "Apollo 11 reached the moon.": [0.0, 1.0],
            "wall": [0.9, 0.1],
        },
        default=[0.5, 0.5],
    )


@pytest.fixture()
def services(archive_config: ArchiveConfig, embedder: FakeEmbeddingClient):
    built = build_services(archive_config, embedding_provider=embedder)
    yield built
    built.close()


@pytest.fixture()
def client(services: ArchiveServices) -> TestClient:
    return TestClient(create_app(services))


def _token(client: TestClient, email: str, role: str = "editor") -> str:
    response = client.post(
        "/api/auth/register", json={"email": email, "password": "pw", "role": role}
    )
    assert response.status_code == 200
    response = client.post("/api/auth/login", json={"email": email, "password": "pw"})
    assert response.status_code == 200
    return response.json()["token"]


def _auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def test_health(client: TestClient) -> None:
    response = client.get("/")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_register_duplicate_and_bad_login(client: TestClient) -> None:
    _token(client, "ada@example.com")

    dup = client.post(
        "/api/auth/register", json={"email": "ada@example.com", "password": "x"}
    )
    bad = client.post(
        "/api/auth/login", json={"email": "ada@example.com", "password": "nope"}
    )

    assert dup.status_code == 400
    assert dup.json()["error"]["kind"] == "conflict"
    assert bad.status_code == 400
    assert bad.json()["error"]["kind"] == "invalid_credentials"


def test_create_document_requires_editor(client: TestClient) -> None:
    payload = {"title": "Wall", "date": "1989", "text": "The Berlin wall fell."}

    anonymous = client.post("/api/documents", json=payload)
    viewer = client.post(
        "/api/documents", json=payload, headers=_auth(_token(client, "v@example.com", "viewer"))
    )
    garbage = client.post("/api/documents", json=payload, headers=_auth("not-a-jwt"))

    assert anonymous.status_code == 401
    assert viewer.status_code == 403
    assert garbage.status_code == 401


def test_create_list_and_search(client: TestClient) -> None:
    token = _token(client, "ed@example.com")
    for title, text in [
        ("Wall", "The Berlin wall fell."),
        ("Moon", "Apollo 11 reached the moon."),
    ]:
        response = client.post(
            "/api/documents",
            json={"title": title, "date": "", "text": text},
            headers=_auth(token),
        )
        assert response.status_code == 200
        assert response.json()["id"].startswith("doc_")

    listing = client.get("/api/documents", params={"page": 1, "limit": 10}).json()
    assert listing["total"] == 2
    assert [item["title"] for item in listing["items"]] == ["Moon", "Wall"]

    response = client.post("/api/search", json={"query": "wall", "page": 1, "limit": 10})

    assert response.status_code == 200
    data = response.json()
    assert set(data) == {"version", "total", "page", "limit", "results"}
    assert data["version"] == 1
    assert data["total"] == 2
    assert [r["title"] for r in data["results"]] == ["Wall", "Moon"]
    assert data["results"][0]["score"] > data["results"][1]["score"]


def test_listing_clamps_paging(client: TestClient) -> None:
    data = client.get("/api/documents", params={"page": 0, "limit": 500}).json()

    assert data["page"] == 1
    assert data["limit"] == 100
    assert data["items"] == []


def test_search_missing_query_is_400(client: TestClient, embedder: FakeEmbeddingClient) -> None:
    response = client.post("/api/search", json={"page": 1})

    assert response.status_code == 400
    assert response.json()["error"]["kind"] == "invalid_query"
    assert embedder.embed_calls == []


def test_search_provider_failure_is_structured(
    client: TestClient, embedder: FakeEmbeddingClient
) -> None:
    embedder.error = ProviderError("rate_limited", "quota")

    response = client.post("/api/search", json={"query": "wall"})

    assert response.status_code == 502
    error = response.json()["error"]
    assert error["kind"] == "embedding_unavailable"
    assert error["provider_kind"] == "rate_limited"
    assert error["retryable"] is True


def test_search_without_provider(archive_config: ArchiveConfig, monkeypatch) -> None:
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    services = build_services(archive_config)
    try:
        client = TestClient(create_app(services))
        response = client.post("/api/search", json={"query": "wall"})
    finally:
        services.close()

    assert response.status_code == 502
    assert response.json()["error"]["provider_kind"] == "unauthenticated"


def test_empty_query_without_provider_is_400(
    archive_config: ArchiveConfig, monkeypatch
) -> None:
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    services = build_services(archive_config)
    try:
        client = TestClient(create_app(services))
        response = client.post("/api/search", json={"query": ""})
    finally:
        services.close()

    assert response.status_code == 400
    assert response.json()["error"]["kind"] == "invalid_query"


def test_upload_pdf_and_serve_file(
    client: TestClient, services: ArchiveServices, monkeypatch
) -> None:
    monkeypatch.setattr(
        pipeline_module, "extract_pdf_text", lambda path: "The Berlin wall fell."
    )
    token = _token(client, "ed@example.com")

    response = client.post(
        "/api/upload",
        files={"file": ("wall report.pdf", b"%PDF-1.4 fake", "application/pdf")},
        data={"date": "1989"},
        headers=_auth(token),
    )

    assert response.status_code == 200
    doc = services.storage.get_document(doc_id=response.json()["id"])
    assert doc is not None
    assert doc.title == "wall report.pdf"
    assert doc.text == "The Berlin wall fell."
    assert doc.embedding == (1.0, 0.0)
    assert doc.source_file is not None
    stored_name = Path(doc.source_file).name
    assert stored_name.endswith("_wall_report.pdf")

    served = client.get(f"/uploads/{stored_name}")
    assert served.status_code == 200
    assert served.content == b"%PDF-1.4 fake"


def test_upload_without_file_is_400(client: TestClient) -> None:
    token = _token(client, "ed@example.com")

    response = client.post("/api/upload", data={"title": "x"}, headers=_auth(token))

    assert response.status_code == 400
    assert response.json()["error"]["kind"] == "ingestion_error"


def test_admin_stats_requires_admin(client: TestClient) -> None:
    editor = _token(client, "ed@example.com")
    admin = _token(client, "root@example.com", "admin")

    forbidden = client.get("/api/admin/stats", headers=_auth(editor))
    allowed = client.get("/api/admin/stats", headers=_auth(admin))

    assert forbidden.status_code == 403
    assert allowed.status_code == 200
    assert allowed.json() == {"total_documents": 0, "total_users": 2}
