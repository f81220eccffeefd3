"""Tests for hashing, ids, JSON, stream helpers and the rate limiter."""

from datetime import datetime, timezone

import pytest
from hypothesis import given, strategies as st

from vrux.core import JSONParseError, RateLimiter, dumps, loads, loads_object, safe_json_dumps
from vrux.core.hash import Algorithm, hash_string
from vrux.core.id import new_request_id, new_session_token, new_share_id, new_template_id, new_user_id
from vrux.core.stream import StreamCounter, split_chunks

from ..fakes import FakeClock


# ============================================================================
# Hashing
# ============================================================================

@pytest.mark.unit
def test_hash_string_lengths():
    assert len(hash_string("test")) == 16
    assert len(hash_string("test", Algorithm.SHA256)) == 64
    assert len(hash_string("test", Algorithm.SHA256, truncate=16)) == 16


@pytest.mark.unit
def test_hash_string_deterministic():
    assert hash_string("prompt") == hash_string("prompt")
    assert hash_string("prompt") != hash_string("prompt ")


# ============================================================================
# IDs
# ============================================================================

@pytest.mark.unit
def test_prefixed_ids():
    assert new_request_id().startswith("req_")
    assert new_user_id().startswith("usr_")
    assert new_template_id().startswith("user-")


@pytest.mark.unit
def test_share_id_is_twelve_hex_chars():
    share_id = new_share_id()
    assert len(share_id) == 12
    int(share_id, 16)


@pytest.mark.unit
def test_session_tokens_are_unique():
    tokens = {new_session_token() for _ in range(100)}
    assert len(tokens) == 100
    assert all(len(t) == 64 for t in tokens)


# ============================================================================
# JSON
# ============================================================================

@pytest.mark.unit
def test_dumps_writes_datetimes_as_iso():
    moment = datetime(2024, 1, 15, tzinfo=timezone.utc)
    assert loads(dumps({"at": moment})) == {"at": "2024-01-15T00:00:00+00:00"}


@pytest.mark.unit
def test_safe_json_dumps_is_compact():
    assert safe_json_dumps({"a": 1, "b": [1, 2]}) == '{"a":1,"b":[1,2]}'


@pytest.mark.unit
def test_loads_invalid_json():
    with pytest.raises(JSONParseError):
        loads("{not json")


@pytest.mark.unit
def test_loads_object_rejects_arrays():
    assert loads_object('{"type": "ping"}') == {"type": "ping"}
    with pytest.raises(JSONParseError):
        loads_object("[1, 2]")


# ============================================================================
# Stream helpers
# ============================================================================

@pytest.mark.unit
def test_split_chunks():
    assert list(split_chunks("abcdefg", 3)) == ["abc", "def", "g"]
    assert list(split_chunks("", 3)) == []
    with pytest.raises(ValueError):
        list(split_chunks("abc", 0))


@pytest.mark.unit
@given(st.text(max_size=500), st.integers(min_value=1, max_value=80))
def test_split_chunks_rejoins(text, size):
    chunks = list(split_chunks(text, size))
    assert "".join(chunks) == text
    assert all(len(c) <= size for c in chunks)


@pytest.mark.unit
def test_stream_counter_estimates_tokens():
    counter = StreamCounter()
    counter.track("abcd")
    counter.track("e")

    assert counter.count == 2
    assert counter.chars == 5
    assert counter.estimated_tokens == 2


# ============================================================================
# Rate limiter
# ============================================================================

@pytest.mark.unit
def test_rate_limiter_blocks_over_limit():
    clock = FakeClock()
    limiter = RateLimiter(window_seconds=60, max_requests=3, clock=clock)

    assert all(limiter.is_allowed("1.2.3.4") for _ in range(3))
    assert limiter.is_allowed("1.2.3.4") is False
    assert limiter.remaining("1.2.3.4") == 0
    assert limiter.violations == 1

    # Other callers are unaffected
    assert limiter.is_allowed("5.6.7.8") is True


@pytest.mark.unit
def test_rate_limiter_window_slides():
    clock = FakeClock()
    limiter = RateLimiter(window_seconds=60, max_requests=2, clock=clock)

    limiter.is_allowed("ip")
    clock.now += 30
    limiter.is_allowed("ip")
    assert limiter.is_allowed("ip") is False

    clock.now += 31
    assert limiter.requests("ip") == 1
    assert limiter.is_allowed("ip") is True


@pytest.mark.unit
def test_rate_limiter_reset_time():
    clock = FakeClock(now=0.0)
    limiter = RateLimiter(window_seconds=60, max_requests=1, clock=clock)

    assert limiter.reset_time("ip") is None
    limiter.is_allowed("ip")
    assert limiter.reset_time("ip") == datetime.fromtimestamp(60, tz=timezone.utc)


@pytest.mark.unit
@given(st.lists(st.floats(min_value=0, max_value=30, allow_nan=False), max_size=60))
def test_rate_limiter_never_exceeds_window(steps):
    """Property test: no window ever holds more than max_requests."""
    clock = FakeClock(now=0.0)
    limiter = RateLimiter(window_seconds=60, max_requests=5, clock=clock)
    allowed: list[float] = []

    for step in steps:
        clock.now += step
        if limiter.is_allowed("ip"):
            allowed.append(clock.now)
        in_window = [t for t in allowed if t > clock.now - 60]
        assert len(in_window) <= 5
