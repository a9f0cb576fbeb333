"""
FastAPI server for the archive.

Exposes registration/login, document submission and upload, the newest-first
listing, semantic search and admin stats. Build the app with ``create_app``;
all state lives on ``app.state.services``.
"""

import asyncio
import logging
from typing import Annotated, Any, Callable

from fastapi import Depends, FastAPI, File, Form, Header, Query, Request, UploadFile
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from .auth import Principal, check_role
from .errors import ArchiveError, AuthenticationError, IngestionError
from .models import (
    DocumentCreateRequest,
    DocumentPage,
    DocumentSummary,
    LoginRequest,
    RegisterRequest,
    SearchRequest,
)
from .search import SearchResult
from .services import ArchiveServices

logger = logging.getLogger(__name__)


def get_services(request: Request) -> ArchiveServices:
    return request.app.state.services


def get_principal(
    services: Annotated[ArchiveServices, Depends(get_services)],
    authorization: Annotated[str | None, Header()] = None,
) -> Principal:
    """Resolve the bearer token on the request."""
    if not authorization:
        raise AuthenticationError("Missing token")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("Invalid token")
    return services.auth.authenticate(token.strip())


def require_role(*roles: str) -> Callable[..., Principal]:
    """Dependency factory: admins always pass, others need one of *roles*."""

    def dependency(
        principal: Annotated[Principal, Depends(get_principal)],
    ) -> Principal:
        check_role(principal, roles)
        return principal

    return dependency


async def _archive_error_handler(request: Request, exc: ArchiveError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse({"error": exc.to_dict()}, status_code=exc.status_code)


def create_app(services: ArchiveServices) -> FastAPI:
    """Build the HTTP app around an already-constructed service container."""
    app = FastAPI(title="TimeArchive", description="Document archive with semantic search")
    app.state.services = services
    app.add_exception_handler(ArchiveError, _archive_error_handler)

    Services = Annotated[ArchiveServices, Depends(get_services)]
    Editor = Annotated[Principal, Depends(require_role("editor"))]
    Admin = Annotated[Principal, Depends(require_role("admin"))]

    @app.get("/")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/auth/register")
    async def register(request: RegisterRequest, services: Services):
        await asyncio.to_thread(
            services.auth.register, request.email, request.password, request.role
        )
        return {"message": "Registered successfully"}

    @app.post("/api/auth/login")
    async def login(request: LoginRequest, services: Services):
        token = await asyncio.to_thread(
            services.auth.login, request.email, request.password
        )
        return {"token": token}

    @app.post("/api/documents")
    async def create_document(
        request: DocumentCreateRequest, services: Services, principal: Editor
    ):
        result = await asyncio.to_thread(
            services.ingestion.ingest_text,
            title=request.title,
            date=request.date,
            text=request.text,
            created_by=principal.user_id,
        )
        return {"message": "Document saved", "id": result.document_id}

    @app.get("/api/documents", response_model=DocumentPage)
    async def list_documents(
        services: Services,
        page: Annotated[int, Query()] = 1,
        limit: Annotated[int, Query()] = 10,
    ) -> DocumentPage:
        page = max(1, page)
        limit = min(100, max(1, limit))
        total = await asyncio.to_thread(services.storage.count_documents)
        rows = await asyncio.to_thread(
            services.storage.list_documents, page=page, limit=limit
        )
        return DocumentPage(
            page=page,
            limit=limit,
            total=total,
            items=[DocumentSummary(**row) for row in rows],
        )

    @app.post("/api/upload")
    async def upload_document(
        services: Services,
        principal: Editor,
        file: Annotated[UploadFile | None, File()] = None,
        title: Annotated[str, Form()] = "",
        date: Annotated[str, Form()] = "",
        text: Annotated[str, Form()] = "",
    ):
        if file is None or not file.filename:
            raise IngestionError("No file provided")
        data = await file.read()
        stored = await asyncio.to_thread(services.files.save, file.filename, data)
        result = await asyncio.to_thread(
            services.ingestion.ingest_file,
            stored.path,
            filename=file.filename,
            content_type=file.content_type,
            title=title or None,
            date=date,
            fallback_text=text,
            created_by=principal.user_id,
            source_file=stored.locator,
        )
        return {"message": "Uploaded and indexed", "id": result.document_id}

    @app.post("/api/search", response_model=SearchResult)
    async def search(request: SearchRequest, services: Services) -> SearchResult:
        return await asyncio.to_thread(
            services.search_engine.search,
            request.query,
            page=request.page,
            limit=request.limit,
        )

    @app.get("/api/admin/stats")
    async def admin_stats(services: Services, principal: Admin) -> dict[str, Any]:
        return {
            "total_documents": await asyncio.to_thread(services.storage.count_documents),
            "total_users": await asyncio.to_thread(services.storage.count_users),
        }

    app.mount(
        "/uploads",
        StaticFiles(directory=services.config.upload_dir, check_dir=False),
        name="uploads",
    )
    return app


def run_server(services: ArchiveServices, host: str = "127.0.0.1", port: int = 4000):
    """Run the FastAPI server."""
    import uvicorn

    uvicorn.run(create_app(services), host=host, port=port)
