"""
Storage for uploaded source files.
"""

from __future__ import annotations

import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol


@dataclass(frozen=True)
class StoredFile:
    path: str
    locator: str


class FileStore(Protocol):
    def save(self, filename: str, data: bytes) -> StoredFile:
        """Persist raw upload bytes and return where they ended up."""


def safe_filename(filename: str) -> str:
    name = Path(filename).name
    cleaned = re.sub(r"[^A-Za-z0-9._-]+", "_", name).strip("._")
    return cleaned or "upload"


class LocalFileStore:
    """Keep uploads on local disk as ``<epoch_ms>_<name>``."""

    def __init__(self, upload_dir: str) -> None:
        self.upload_dir = Path(upload_dir)

    def save(self, filename: str, data: bytes) -> StoredFile:
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        target = self.upload_dir / f"{int(time.time() * 1000)}_{safe_filename(filename)}"
        target.write_bytes(data)
        return StoredFile(path=str(target), locator=str(target))
