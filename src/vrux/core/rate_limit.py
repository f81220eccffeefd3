"""In-memory sliding-window rate limiter."""

import time
from collections import defaultdict, deque
from collections.abc import Callable
from datetime import datetime, timezone


class RateLimiter:
    """
    Sliding-window limiter keyed by client identifier.

    Each identifier may make ``max_requests`` requests in any window of
    ``window_seconds``. Timestamps older than the window are pruned on
    every call, so memory stays proportional to recent traffic.
    """

    def __init__(
        self,
        window_seconds: float = 60.0,
        max_requests: int = 10,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if window_seconds <= 0 or max_requests <= 0:
            raise ValueError("window_seconds and max_requests must be positive")
        self.window_seconds = window_seconds
        self.max_requests = max_requests
        self._clock = clock
        self._requests: defaultdict[str, deque[float]] = defaultdict(deque)
        self.violations = 0

    @property
    def limit(self) -> int:
        return self.max_requests

    def _prune(self, identifier: str) -> deque[float]:
        cutoff = self._clock() - self.window_seconds
        timestamps = self._requests[identifier]
        while timestamps and timestamps[0] <= cutoff:
            timestamps.popleft()
        if not timestamps:
            del self._requests[identifier]
            return deque()
        return timestamps

    def is_allowed(self, identifier: str) -> bool:
        """Record a request for ``identifier`` if it fits in the window."""
        timestamps = self._prune(identifier)
        if len(timestamps) >= self.max_requests:
            self.violations += 1
            return False
        self._requests[identifier].append(self._clock())
        return True

    def requests(self, identifier: str) -> int:
        """Requests counted in the current window."""
        return len(self._prune(identifier))

    def remaining(self, identifier: str) -> int:
        return max(0, self.max_requests - self.requests(identifier))

    def reset_time(self, identifier: str) -> datetime | None:
        """When the oldest counted request leaves the window, or None if idle."""
        timestamps = self._prune(identifier)
        if not timestamps:
            return None
        return datetime.fromtimestamp(timestamps[0] + self.window_seconds, tz=timezone.utc)

    def clear(self) -> None:
        self._requests.clear()
        self.violations = 0
