"""Rolling HTTP request statistics.

Prometheus counters are cumulative; the operations dashboard and the
alerting engine need recent figures (last minute), kept here.
"""

import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass


@dataclass(frozen=True)
class RequestSample:
    timestamp: float
    duration_ms: float
    status_code: int


class RequestStats:
    """Requests seen in the last ``window_seconds``."""

    def __init__(self, window_seconds: float = 60.0, clock: Callable[[], float] = time.time) -> None:
        self.window_seconds = window_seconds
        self._clock = clock
        self._samples: deque[RequestSample] = deque()
        self.total_requests = 0

    def record(self, duration_ms: float, status_code: int) -> None:
        self._samples.append(RequestSample(self._clock(), duration_ms, status_code))
        self.total_requests += 1
        self._prune()

    def _prune(self) -> None:
        cutoff = self._clock() - self.window_seconds
        while self._samples and self._samples[0].timestamp < cutoff:
            self._samples.popleft()

    @property
    def requests_per_minute(self) -> float:
        self._prune()
        return len(self._samples) * 60.0 / self.window_seconds

    @property
    def requests_per_second(self) -> float:
        return self.requests_per_minute / 60.0

    @property
    def avg_response_time(self) -> float:
        """Mean response time in milliseconds over the window."""
        self._prune()
        if not self._samples:
            return 0.0
        return sum(s.duration_ms for s in self._samples) / len(self._samples)

    @property
    def error_rate(self) -> float:
        """Percentage of 5xx responses over the window."""
        self._prune()
        if not self._samples:
            return 0.0
        errors = sum(1 for s in self._samples if s.status_code >= 500)
        return errors * 100.0 / len(self._samples)
