"""Chunked streaming helpers."""

from collections.abc import Iterator
from dataclasses import dataclass


@dataclass
class StreamCounter:
    """Track chunk statistics for a stream."""

    count: int = 0
    chars: int = 0

    def track(self, chunk: str) -> None:
        self.count += 1
        self.chars += len(chunk)

    @property
    def estimated_tokens(self) -> int:
        """Rough token estimate (4 characters per token)."""
        return -(-self.chars // 4)


def split_chunks(text: str, size: int = 50) -> Iterator[str]:
    """
    Split text into fixed-size chunks, last one may be shorter.

    Args:
        text: Text to split
        size: Characters per chunk

    Yields:
        Consecutive slices of ``text``
    """
    if size <= 0:
        raise ValueError("size must be positive")
    for start in range(0, len(text), size):
        yield text[start : start + size]
