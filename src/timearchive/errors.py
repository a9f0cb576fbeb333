"""
Error kinds surfaced by the archive core and its collaborators.

Upstream clients raise ``ProviderError`` / ``StoreError``; the search engine
translates those into ``SearchError`` subclasses, which the HTTP layer renders
as ``{"error": {"kind", "message", "retryable"}}``.
"""

from __future__ import annotations

from typing import Any, Literal, TypeAlias

ProviderErrorKind: TypeAlias = Literal[
    "unauthenticated", "rate_limited", "network", "invalid_input"
]
StoreErrorKind: TypeAlias = Literal["unavailable", "timeout"]


class ArchiveError(Exception):
    """Base exception for the archive application."""

    status_code: int = 500
    kind: str = "archive_error"

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "message": str(self), "retryable": False}


class ConfigurationError(ArchiveError):
    """Raised when configuration is invalid."""

    kind = "configuration_error"


class ProviderError(ArchiveError):
    """Raised by the embedding provider client."""

    kind = "provider_error"

    def __init__(self, kind: ProviderErrorKind, message: str) -> None:
        super().__init__(message)
        self.provider_kind: ProviderErrorKind = kind


class StoreError(ArchiveError):
    """Raised by the document store when a read cannot be served."""

    kind = "store_error"

    def __init__(self, kind: StoreErrorKind, message: str) -> None:
        super().__init__(message)
        self.store_kind: StoreErrorKind = kind


class SearchError(ArchiveError):
    """Base for every failure a search can end with."""

    kind = "search_error"
    retryable = False

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "message": str(self), "retryable": self.retryable}


class InvalidQuery(SearchError):
    status_code = 400
    kind = "invalid_query"


class EmbeddingUnavailable(SearchError):
    """The embedding provider could not produce a vector."""

    status_code = 502
    kind = "embedding_unavailable"

    def __init__(self, message: str, *, provider_kind: str | None = None) -> None:
        super().__init__(message)
        self.provider_kind = provider_kind
        # Rate limits and transport failures are worth retrying by the caller.
        self.retryable = provider_kind in {"rate_limited", "network"}

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["provider_kind"] = self.provider_kind
        return payload


class CorpusUnavailable(SearchError):
    status_code = 503
    kind = "corpus_unavailable"
    retryable = True


class UpstreamTimeout(SearchError):
    """An upstream call exceeded its time bound."""

    status_code = 504
    kind = "upstream_timeout"
    retryable = True

    def __init__(self, message: str, *, upstream: str) -> None:
        super().__init__(message)
        self.upstream = upstream

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["upstream"] = self.upstream
        return payload


class AuthenticationError(ArchiveError):
    status_code = 401
    kind = "unauthenticated"


class AuthorizationError(ArchiveError):
    status_code = 403
    kind = "forbidden"


class ConflictError(ArchiveError):
    """Raised when a unique resource already exists."""

    status_code = 400
    kind = "conflict"


class IngestionError(ArchiveError):
    """Raised when an uploaded document cannot be turned into text."""

    status_code = 400
    kind = "ingestion_error"


class InvalidCredentials(ArchiveError):
    """Login with an unknown email or a wrong password."""

    status_code = 400
    kind = "invalid_credentials"
