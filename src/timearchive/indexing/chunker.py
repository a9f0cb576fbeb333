"""
Splits long document text into pieces small enough to embed.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

PARAGRAPH_BREAK = "\n\n"


@dataclass(frozen=True)
class TextChunk:
    """One embeddable piece of a document and where it sits in the text."""

    text: str
    position: int
    start_char: int
    end_char: int


class TextChunker:
    """
    Fixed-size chunker that prefers paragraph boundaries.

    Windows are ``chunk_size`` characters; when a paragraph break falls in the
    second half of a window the chunk ends there instead. Chunks do not
    overlap, so every character lands in exactly one chunk.
    """

    def __init__(self, chunk_size: int = 8000) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be > 0")
        self.chunk_size = chunk_size

    def chunk_text(self, text: str) -> list[TextChunk]:
        body = text.strip()
        pieces = (
            (body[start:end].strip(), start, end) for start, end in self._windows(body)
        )
        return [
            TextChunk(text=piece, position=position, start_char=start, end_char=end)
            for position, (piece, start, end) in enumerate(p for p in pieces if p[0])
        ]

    def _windows(self, body: str) -> Iterator[tuple[int, int]]:
        start = 0
        while start < len(body):
            end = start + self.chunk_size
            if end < len(body):
                cut = body.rfind(PARAGRAPH_BREAK, start + self.chunk_size // 2, end)
                if cut != -1:
                    end = cut + len(PARAGRAPH_BREAK)
            else:
                end = len(body)
            yield start, end
            start = end
