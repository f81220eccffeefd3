"""Request cache for provider responses.

Identical generation requests within the TTL are answered from memory
instead of calling the provider again. Keys are hashed so prompts of any
length cost the same to store.
"""

import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import asdict, dataclass
from typing import Any, Generic, NamedTuple, TypeVar

from .hash import Algorithm, hash_string

T = TypeVar("T")


class _Entry(NamedTuple, Generic[T]):
    value: T
    expires_at: float | None


@dataclass
class Stats:
    size: int = 0
    max_size: int = 0
    hits: int = 0
    misses: int = 0
    evictions: int = 0

    @property
    def hit_rate(self) -> float:
        lookups = self.hits + self.misses
        return self.hits / lookups if lookups else 0.0

    def to_dict(self) -> dict[str, Any]:
        return {**asdict(self), "hit_rate": self.hit_rate}


class LRUCache(Generic[T]):
    """
    Bounded mapping with least-recently-used eviction and optional expiry.

    Overflow drops ``evict_batch`` of the oldest entries in one go.

    Examples:
        >>> cache = LRUCache[dict](max_size=500, ttl_seconds=3600)
        >>> cache.set("openai:gpt-4:a pricing card", {"code": "..."})
        >>> cache.get("openai:gpt-4:a pricing card")
        {'code': '...'}
    """

    def __init__(
        self,
        max_size: int = 100,
        ttl_seconds: float | None = None,
        evict_batch: int = 1,
        hash_algorithm: Algorithm = Algorithm.XXHASH64,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_size <= 0:
            raise ValueError("max_size must be positive")
        if evict_batch <= 0:
            raise ValueError("evict_batch must be positive")

        self.max_size = max_size
        self.ttl_seconds = ttl_seconds
        self.evict_batch = evict_batch
        self.hash_algorithm = hash_algorithm
        self._clock = clock
        self._entries: OrderedDict[str, _Entry[T]] = OrderedDict()
        self._stats = Stats(max_size=max_size)

    def _key(self, key: str) -> str:
        return hash_string(key, self.hash_algorithm, truncate=16)

    def _deadline(self) -> float | None:
        return None if self.ttl_seconds is None else self._clock() + self.ttl_seconds

    def _sync_size(self) -> None:
        self._stats.size = len(self._entries)

    def get(self, key: str) -> T | None:
        """Return the cached value, or None when absent or expired."""
        hashed = self._key(key)
        entry = self._entries.get(hashed)

        if entry is not None and entry.expires_at is not None and self._clock() >= entry.expires_at:
            del self._entries[hashed]
            self._sync_size()
            entry = None

        if entry is None:
            self._stats.misses += 1
            return None

        self._entries.move_to_end(hashed)
        self._stats.hits += 1
        return entry.value

    def set(self, key: str, value: T) -> None:
        hashed = self._key(key)
        self._entries.pop(hashed, None)
        self._entries[hashed] = _Entry(value, self._deadline())

        overflow = len(self._entries) > self.max_size
        # Always keep the entry just written
        for _ in range(min(self.evict_batch, len(self._entries) - 1) if overflow else 0):
            self._entries.popitem(last=False)
            self._stats.evictions += 1

        self._sync_size()

    def delete(self, key: str) -> bool:
        """Remove an entry. Returns False when it was not cached."""
        removed = self._entries.pop(self._key(key), None) is not None
        self._sync_size()
        return removed

    def clear(self) -> None:
        self._entries.clear()
        self._sync_size()

    @property
    def stats(self) -> Stats:
        return self._stats

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        # Membership does not refresh recency
        return self._key(key) in self._entries


__all__ = ["LRUCache", "Stats"]
