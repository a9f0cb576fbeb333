"""Process-wide logging setup."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

from rich.logging import RichHandler


class JsonFormatter(logging.Formatter):
    """Emit logs as structured JSON lines."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True)


def configure_logging(level: str = "INFO", *, json_logs: bool = False) -> None:
    """Install a single root handler; later calls are no-ops."""
    root = logging.getLogger()
    if root.handlers:
        return

    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    handler: logging.Handler
    if json_logs:
        handler = logging.StreamHandler()
        handler.setFormatter(JsonFormatter())
    else:
        handler = RichHandler(rich_tracebacks=True, show_path=False)
    root.addHandler(handler)

    # google-genai logs every HTTP request at INFO through httpx.
    logging.getLogger("httpx").setLevel(logging.WARNING)
