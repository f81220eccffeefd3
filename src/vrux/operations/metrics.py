"""
System Metrics
psutil snapshots for the operations dashboard and fixed-length histories.
"""

import os
from collections import deque
from collections.abc import Iterable

import psutil

from ..core import ApiModel
from ..monitoring import RequestStats

DEFAULT_WINDOW = 20


class CpuMetrics(ApiModel):
    usage: float
    cores: int
    load_average: list[float]


class UsageMetrics(ApiModel):
    used: int
    total: int
    percentage: float


class NetworkMetrics(ApiModel):
    bytes_in: int
    bytes_out: int
    requests_per_second: float


class SystemMetrics(ApiModel):
    cpu: CpuMetrics
    memory: UsageMetrics
    disk: UsageMetrics
    network: NetworkMetrics


class SystemSampler:
    """
    Reads host metrics through psutil.

    Network counters are reported as deltas since the previous sample; the
    first sample reports zero.
    """

    def __init__(self, request_stats: RequestStats | None = None, disk_path: str = "/") -> None:
        self.request_stats = request_stats
        self.disk_path = disk_path
        self._last_net: tuple[int, int] | None = None

    def fork(self) -> "SystemSampler":
        """Same sources, separate network baseline."""
        return SystemSampler(self.request_stats, self.disk_path)

    def _network_delta(self) -> tuple[int, int]:
        counters = psutil.net_io_counters()
        current = (counters.bytes_recv, counters.bytes_sent) if counters else (0, 0)
        previous = self._last_net or current
        self._last_net = current
        return max(0, current[0] - previous[0]), max(0, current[1] - previous[1])

    def sample(self) -> SystemMetrics:
        memory = psutil.virtual_memory()
        disk = psutil.disk_usage(self.disk_path)
        bytes_in, bytes_out = self._network_delta()
        rps = self.request_stats.requests_per_second if self.request_stats else 0.0

        return SystemMetrics(
            cpu=CpuMetrics(
                usage=psutil.cpu_percent(interval=None),
                cores=psutil.cpu_count() or 1,
                load_average=list(os.getloadavg()) if hasattr(os, "getloadavg") else [0.0, 0.0, 0.0],
            ),
            memory=UsageMetrics(used=memory.used, total=memory.total, percentage=memory.percent),
            disk=UsageMetrics(used=disk.used, total=disk.total, percentage=disk.percent),
            network=NetworkMetrics(bytes_in=bytes_in, bytes_out=bytes_out, requests_per_second=rps),
        )


_default_sampler: SystemSampler | None = None


def collect_system_metrics(request_stats: RequestStats | None = None) -> SystemMetrics:
    """One-off snapshot through a module-level sampler, so network deltas carry over."""
    global _default_sampler
    if _default_sampler is None:
        _default_sampler = SystemSampler(request_stats)
    elif request_stats is not None:
        _default_sampler.request_stats = request_stats
    return _default_sampler.sample()


class RollingWindow:
    """
    Fixed-length numeric history.

    Starts filled with ``fill``; every push drops the oldest value, so the
    length never changes.
    """

    def __init__(self, size: int = DEFAULT_WINDOW, fill: float = 0.0) -> None:
        if size <= 0:
            raise ValueError("size must be positive")
        self.size = size
        self._values: deque[float] = deque([fill] * size, maxlen=size)

    def push(self, value: float) -> None:
        self._values.append(value)

    def extend(self, values: Iterable[float]) -> None:
        for value in values:
            self.push(value)

    def values(self) -> list[float]:
        return list(self._values)

    @property
    def latest(self) -> float:
        return self._values[-1]

    def __len__(self) -> int:
        return len(self._values)


class MetricHistory:
    """cpu, memory and request-rate histories fed from one snapshot at a time."""

    def __init__(self, size: int = DEFAULT_WINDOW) -> None:
        self.cpu = RollingWindow(size)
        self.memory = RollingWindow(size)
        self.requests = RollingWindow(size)

    def update(self, metrics: SystemMetrics) -> None:
        self.cpu.push(metrics.cpu.usage)
        self.memory.push(metrics.memory.percentage)
        self.requests.push(metrics.network.requests_per_second)

    def to_dict(self) -> dict[str, list[float]]:
        return {
            "cpu": self.cpu.values(),
            "memory": self.memory.values(),
            "requests": self.requests.values(),
        }
