"""Tests for cache module."""

import pytest
from hypothesis import given, strategies as st

from vrux.core.cache import LRUCache

from ..fakes import FakeClock


@pytest.mark.unit
def test_lru_basic():
    """Test basic cache operations."""
    cache = LRUCache[str](max_size=3)

    cache.set("a", "value_a")
    cache.set("b", "value_b")

    assert cache.get("a") == "value_a"
    assert cache.get("b") == "value_b"
    assert len(cache) == 2


@pytest.mark.unit
def test_lru_eviction_order():
    """Least recently used entry goes first."""
    cache = LRUCache[str](max_size=2)

    cache.set("a", "value_a")
    cache.set("b", "value_b")
    _ = cache.get("a")
    cache.set("c", "value_c")

    assert cache.get("a") == "value_a"
    assert cache.get("b") is None
    assert cache.get("c") == "value_c"
    assert cache.stats.evictions == 1


@pytest.mark.unit
def test_lru_batch_eviction():
    """Exceeding the limit drops evict_batch entries at once."""
    cache = LRUCache[int](max_size=4, evict_batch=2)

    for i in range(5):
        cache.set(str(i), i)

    assert len(cache) == 3
    assert "0" not in cache
    assert "1" not in cache
    assert cache.get("4") == 4


@pytest.mark.unit
def test_lru_ttl():
    """Entries expire once the TTL has passed."""
    clock = FakeClock()
    cache = LRUCache[str](max_size=10, ttl_seconds=300, clock=clock)

    cache.set("key", "value")
    clock.now = 299
    assert cache.get("key") == "value"

    clock.now = 300
    assert cache.get("key") is None
    assert len(cache) == 0


@pytest.mark.unit
def test_lru_update_and_delete():
    cache = LRUCache[str](max_size=10)

    cache.set("key", "value1")
    cache.set("key", "value2")
    assert cache.get("key") == "value2"
    assert len(cache) == 1

    assert cache.delete("key") is True
    assert cache.delete("key") is False


@pytest.mark.unit
def test_stats_hit_rate():
    cache = LRUCache[str](max_size=10)

    cache.set("key", "value")
    _ = cache.get("key")
    _ = cache.get("missing")

    assert cache.stats.hits == 1
    assert cache.stats.misses == 1
    assert cache.stats.hit_rate == 0.5
    assert cache.stats.to_dict()["size"] == 1


@pytest.mark.unit
def test_invalid_arguments():
    with pytest.raises(ValueError):
        LRUCache[str](max_size=0)
    with pytest.raises(ValueError):
        LRUCache[str](max_size=10, evict_batch=0)


@pytest.mark.unit
@given(st.lists(st.text(min_size=1, max_size=10), min_size=1, max_size=200))
def test_cache_never_exceeds_max_size(keys):
    """Property test: size stays within bounds and recent keys survive."""
    cache = LRUCache[str](max_size=50)

    for key in keys:
        cache.set(key, f"value_{key}")
        assert len(cache) <= 50

    assert cache.get(keys[-1]) == f"value_{keys[-1]}"
