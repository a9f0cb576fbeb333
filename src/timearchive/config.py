"""
Runtime configuration for the archive.

Values come from explicit overrides, then ``TIMEARCHIVE_*`` environment
variables (a local ``.env`` file is honored), then defaults. The resulting
``ArchiveConfig`` is built once at process start and passed to whatever needs
it.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .errors import ConfigurationError


DEFAULT_DB_PATH = "~/.timearchive/archive.duckdb"
DEFAULT_UPLOAD_DIR = "~/.timearchive/uploads"
ENV_DB_PATH = "TIMEARCHIVE_DB_PATH"
ENV_UPLOAD_DIR = "TIMEARCHIVE_UPLOAD_DIR"

_DEV_JWT_SECRET = "dev_jwt_secret_change_me_for_production_use"


def resolve_db_path(override_path: str | None = None) -> str:
    """
    Resolve the DuckDB path from CLI override, env var, or default.

    Precedence:
    1) explicit override_path
    2) TIMEARCHIVE_DB_PATH
    3) default path
    """
    raw_path = override_path or os.getenv(ENV_DB_PATH) or DEFAULT_DB_PATH
    resolved = Path(raw_path).expanduser().resolve()
    resolved.parent.mkdir(parents=True, exist_ok=True)
    return str(resolved)


def resolve_upload_dir(override_path: str | None = None) -> str:
    raw_path = override_path or os.getenv(ENV_UPLOAD_DIR) or DEFAULT_UPLOAD_DIR
    return str(Path(raw_path).expanduser().resolve())


def _as_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _as_number(name: str, default: str, cast: type[int] | type[float]) -> int | float:
    raw = os.getenv(name, default)
    try:
        value = cast(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ConfigurationError(f"{name} must be > 0, got {raw!r}")
    return value


@dataclass(frozen=True)
class ArchiveConfig:
    """Process-wide settings, acquired once at startup."""

    db_path: str
    upload_dir: str
    jwt_secret: str
    jwt_ttl_days: int
    upstream_timeout_seconds: float
    chunk_size: int
    log_level: str
    log_json: bool


def load_config(
    *,
    db_path: str | None = None,
    upload_dir: str | None = None,
    env_file: str | None = None,
) -> ArchiveConfig:
    """Build an ``ArchiveConfig`` from overrides and the environment."""
    load_dotenv(env_file, override=False)

    log_level = os.getenv("TIMEARCHIVE_LOG_LEVEL", "INFO").strip().upper()
    if log_level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        raise ConfigurationError(f"Unsupported log level: {log_level!r}")

    return ArchiveConfig(
        db_path=resolve_db_path(db_path),
        upload_dir=resolve_upload_dir(upload_dir),
        jwt_secret=os.getenv("TIMEARCHIVE_JWT_SECRET", _DEV_JWT_SECRET),
        jwt_ttl_days=int(_as_number("TIMEARCHIVE_JWT_TTL_DAYS", "7", int)),
        upstream_timeout_seconds=float(
            _as_number("TIMEARCHIVE_UPSTREAM_TIMEOUT_SECONDS", "30", float)
        ),
        chunk_size=int(_as_number("TIMEARCHIVE_CHUNK_SIZE", "8000", int)),
        log_level=log_level,
        log_json=_as_bool(os.getenv("TIMEARCHIVE_LOG_JSON")),
    )
