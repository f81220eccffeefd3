"""
Service Health
Per-component health for the operations dashboard.
"""

import time
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any, Literal

from ..core import ApiModel, get_logger
from ..providers import ProviderHealth, now_utc

logger = get_logger(__name__)

ServiceStatus = Literal["healthy", "degraded", "down"]

# Probes slower than this report degraded
DEGRADED_LATENCY_MS = 1000.0

Probe = Callable[[], Any]


class ServiceHealth(ApiModel):
    name: str
    status: ServiceStatus
    latency: float
    uptime: float
    last_check: datetime


class ServiceMonitor:
    """
    Runs the core component probes and folds in provider health.

    Uptime is the share of checks a service has passed since the monitor
    started.
    """

    def __init__(self, probes: Mapping[str, Probe] | None = None) -> None:
        self.probes: dict[str, Probe] = dict(probes or {})
        self._checks: dict[str, tuple[int, int]] = {}

    def _uptime(self, name: str, ok: bool) -> float:
        passed, total = self._checks.get(name, (0, 0))
        passed, total = passed + int(ok), total + 1
        self._checks[name] = (passed, total)
        return passed / total

    def _probe(self, name: str, probe: Probe) -> ServiceHealth:
        start = time.perf_counter()
        try:
            probe()
        except Exception as e:
            latency = (time.perf_counter() - start) * 1000
            logger.warning("service_probe_failed", service=name, error=str(e))
            return ServiceHealth(
                name=name, status="down", latency=latency, uptime=self._uptime(name, False), last_check=now_utc()
            )

        latency = (time.perf_counter() - start) * 1000
        status: ServiceStatus = "degraded" if latency > DEGRADED_LATENCY_MS else "healthy"
        return ServiceHealth(
            name=name, status=status, latency=latency, uptime=self._uptime(name, True), last_check=now_utc()
        )

    def _provider(self, name: str, health: ProviderHealth) -> ServiceHealth:
        if not health.available:
            status: ServiceStatus = "down"
        elif health.error:
            status = "degraded"
        else:
            status = "healthy"
        label = f"AI Provider - {name}"
        return ServiceHealth(
            name=label,
            status=status,
            latency=health.latency or 0.0,
            uptime=self._uptime(label, status != "down"),
            last_check=health.last_checked,
        )

    def check(self, provider_health: Mapping[str, ProviderHealth]) -> list[ServiceHealth]:
        services = [self._probe(name, probe) for name, probe in self.probes.items()]
        services.extend(self._provider(name, health) for name, health in provider_health.items())
        return services


def service_health(
    provider_health: Mapping[str, ProviderHealth],
    probes: Mapping[str, Probe] | None = None,
) -> list[ServiceHealth]:
    """Single health pass without uptime history."""
    return ServiceMonitor(probes).check(provider_health)
