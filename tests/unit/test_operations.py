"""Tests for operations telemetry: metrics windows, service health and alerting."""

import contextvars
from datetime import datetime, timezone
from types import SimpleNamespace

import httpx
import psutil
import pytest
import respx
from hypothesis import given, strategies as st

from vrux.core import NotFoundError, RateLimiter, loads
from vrux.core.tracing import Tracer
from vrux.monitoring import RequestStats
from vrux.operations import (
    AlertAction,
    AlertingEngine,
    AlertRule,
    MetricHistory,
    RollingWindow,
    ServiceMonitor,
    SystemSampler,
    collect_system_metrics,
    default_rules,
    service_health,
)
from vrux.providers import ProviderHealth

from ..fakes import FakeClock

WEBHOOK_URL = "https://hooks.test/alerts"


def rule(**overrides) -> AlertRule:
    fields = {
        "id": "cpu-high",
        "name": "CPU High",
        "description": "CPU above 80%",
        "metric": "system.cpu.usage",
        "condition": "above",
        "threshold": 80,
        "cooldown": 60,
    }
    fields.update(overrides)
    return AlertRule(**fields)


def health(available: bool = True, error: str | None = None) -> ProviderHealth:
    return ProviderHealth(
        available=available, latency=12.0, error=error, last_checked=datetime.now(timezone.utc)
    )


# ============================================================================
# Metrics
# ============================================================================

@pytest.mark.unit
def test_rolling_window_keeps_length():
    window = RollingWindow(size=3)
    assert window.values() == [0.0, 0.0, 0.0]

    window.extend([1, 2, 3, 4])

    assert window.values() == [2, 3, 4]
    assert window.latest == 4
    assert len(window) == 3
    with pytest.raises(ValueError):
        RollingWindow(size=0)


@pytest.mark.unit
@given(st.integers(min_value=1, max_value=50), st.lists(st.floats(allow_nan=False), max_size=200))
def test_rolling_window_length_is_constant(size, values):
    """Property test: any sequence of pushes leaves the length unchanged."""
    window = RollingWindow(size=size)
    window.extend(values)

    assert len(window) == size
    if values:
        assert window.latest == values[-1]


@pytest.mark.unit
def test_system_sampler_snapshot():
    stats = RequestStats()
    stats.record(10.0, 200)
    sampler = SystemSampler(stats)

    first = sampler.sample()
    second = sampler.sample()

    assert first.cpu.cores >= 1
    assert len(first.cpu.load_average) == 3
    assert 0 <= first.memory.percentage <= 100
    assert first.memory.total > 0
    assert first.network.bytes_in == 0
    assert second.network.bytes_in >= 0
    assert first.network.requests_per_second == pytest.approx(1 / 60)

    dumped = first.model_dump(by_alias=True)
    assert set(dumped["network"]) == {"bytesIn", "bytesOut", "requestsPerSecond"}
    assert "loadAverage" in dumped["cpu"]


@pytest.mark.unit
def test_forked_samplers_keep_separate_network_baselines(monkeypatch):
    net = SimpleNamespace(bytes_recv=5_000, bytes_sent=1_000)
    monkeypatch.setattr(psutil, "net_io_counters", lambda: net)
    stats = RequestStats()
    shared = SystemSampler(stats)
    first, second = shared.fork(), shared.fork()
    first.sample()
    second.sample()

    net.bytes_recv += 800
    net.bytes_sent += 300

    for sampler in (first, second):
        network = sampler.sample().network
        assert (network.bytes_in, network.bytes_out) == (800, 300)
    assert first.request_stats is stats


@pytest.mark.unit
def test_collect_system_metrics():
    assert collect_system_metrics().disk.total > 0


@pytest.mark.unit
def test_metric_history_update():
    history = MetricHistory(size=5)
    snapshot = SystemSampler().sample()

    history.update(snapshot)

    data = history.to_dict()
    assert set(data) == {"cpu", "memory", "requests"}
    assert all(len(values) == 5 for values in data.values())
    assert data["memory"][-1] == snapshot.memory.percentage


@pytest.mark.unit
def test_request_stats_window():
    clock = FakeClock(now=0.0)
    stats = RequestStats(window_seconds=60, clock=clock)

    stats.record(100, 200)
    stats.record(300, 500)
    assert stats.avg_response_time == 200
    assert stats.error_rate == 50.0
    assert stats.requests_per_minute == 2

    clock.now = 61
    assert stats.requests_per_minute == 0
    assert stats.error_rate == 0.0
    assert stats.total_requests == 2


# ============================================================================
# Service health
# ============================================================================

@pytest.mark.unit
def test_service_monitor_probes_and_uptime():
    calls = {"n": 0}

    def flaky():
        calls["n"] += 1
        if calls["n"] == 2:
            raise ConnectionError("cache unreachable")

    monitor = ServiceMonitor({"API Gateway": lambda: None, "Cache": flaky})

    first = {s.name: s for s in monitor.check({})}
    second = {s.name: s for s in monitor.check({})}

    assert first["API Gateway"].status == "healthy"
    assert first["Cache"].uptime == 1.0
    assert second["Cache"].status == "down"
    assert second["Cache"].uptime == 0.5


@pytest.mark.unit
def test_service_monitor_maps_provider_health():
    services = service_health(
        {
            "OpenAI": health(available=False, error="API key not configured"),
            "Anthropic": health(error="slow"),
            "Mock": health(),
        }
    )
    status = {s.name: s.status for s in services}

    assert status == {
        "AI Provider - OpenAI": "down",
        "AI Provider - Anthropic": "degraded",
        "AI Provider - Mock": "healthy",
    }
    assert services[0].model_dump(by_alias=True)["lastCheck"] is not None


# ============================================================================
# Tracing
# ============================================================================

@pytest.mark.unit
def test_tracer_recent_and_subscribers():
    tracer = Tracer("vrux-test", buffer_size=3)
    seen = []
    tracer.subscribe(seen.append)

    def emit(name):
        span = tracer.start_span(name)
        span.finish()
        tracer.submit(span)

    for name in ["a", "b", "c", "d"]:
        contextvars.copy_context().run(emit, name)

    assert [s.name for s in tracer.recent()] == ["d", "c", "b"]
    assert [s.name for s in seen] == ["a", "b", "c", "d"]
    assert seen[0].to_dict()["status"] == "ok"

    tracer.unsubscribe(seen.append)
    contextvars.copy_context().run(emit, "e")
    assert len(seen) == 4


# ============================================================================
# Alerting
# ============================================================================

@pytest.mark.unit
def test_default_rules():
    rules = {r.id: r for r in default_rules(WEBHOOK_URL)}

    assert len(rules) == 6
    assert rules["high-memory-usage"].metric == "system.memory.percentage"
    assert [a.type for a in rules["ai-provider-failures"].actions] == ["log", "webhook"]
    assert [a.type for a in default_rules()[3].actions] == ["log"]


@pytest.mark.unit
async def test_alert_triggers_and_notifies_once():
    engine = AlertingEngine([rule()], clock=FakeClock())
    received = []
    engine.subscribe(received.append)

    await engine.evaluate({"system.cpu.usage": 95})
    await engine.evaluate({"system.cpu.usage": 97})

    [alert] = engine.active_alerts()
    assert alert.id == "cpu-high"
    assert alert.current_value == 97
    assert alert.acknowledged is False
    assert "Current value: 95" in alert.message
    assert len(received) == 1


@pytest.mark.unit
async def test_alert_resolves_when_condition_clears():
    engine = AlertingEngine([rule()], clock=FakeClock())

    await engine.evaluate({"system.cpu.usage": 95})
    await engine.evaluate({"system.cpu.usage": 10})

    assert engine.active_alerts() == []


@pytest.mark.unit
async def test_acknowledged_alert_is_kept():
    engine = AlertingEngine([rule()], clock=FakeClock())
    await engine.evaluate({"system.cpu.usage": 95})

    alert = engine.acknowledge("cpu-high")
    await engine.evaluate({"system.cpu.usage": 10})

    assert alert.acknowledged is True
    assert engine.active_alerts()[0].acknowledged is True
    with pytest.raises(NotFoundError):
        engine.acknowledge("missing")


@pytest.mark.unit
@pytest.mark.parametrize(
    "condition,value,fires",
    [("above", 81, True), ("above", 80, False), ("below", 79, True), ("equals", 80, True), ("equals", 81, False)],
)
def test_check_condition(condition, value, fires):
    engine = AlertingEngine([])
    assert engine.check_condition(rule(condition=condition), value) is fires


@pytest.mark.unit
async def test_anomaly_needs_history():
    engine = AlertingEngine([rule(id="traffic", metric="system.requests.rate", condition="anomaly", threshold=3)])

    for _ in range(5):
        await engine.evaluate({"system.requests.rate": 0})
    await engine.evaluate({"system.requests.rate": 100})
    assert engine.active_alerts() == []

    engine = AlertingEngine([rule(id="traffic", metric="system.requests.rate", condition="anomaly", threshold=3)])
    for _ in range(10):
        await engine.evaluate({"system.requests.rate": 0})
    await engine.evaluate({"system.requests.rate": 100})
    assert [a.id for a in engine.active_alerts()] == ["traffic"]
    assert len(engine.history("system.requests.rate")) == 11


@pytest.mark.unit
@respx.mock
async def test_webhook_action_respects_cooldown():
    route = respx.post(WEBHOOK_URL).mock(return_value=httpx.Response(200))
    clock = FakeClock()
    webhook = AlertAction(type="webhook", config={"url": WEBHOOK_URL})
    engine = AlertingEngine([rule(actions=[webhook])], http_client=httpx.AsyncClient(), clock=clock)

    await engine.evaluate({"system.cpu.usage": 95})
    clock.now += 30
    await engine.evaluate({"system.cpu.usage": 96})
    assert route.call_count == 1

    clock.now += 31
    await engine.evaluate({"system.cpu.usage": 97})
    assert route.call_count == 2

    await engine.evaluate({"system.cpu.usage": 10})
    assert route.call_count == 3

    payload = loads(route.calls.last.request.content)["alert"]
    assert payload["id"] == "cpu-high"
    assert payload["status"] == "resolved"
    assert payload["value"] == 97


@pytest.mark.unit
@respx.mock
async def test_webhook_failure_is_contained():
    respx.post(WEBHOOK_URL).mock(return_value=httpx.Response(500))
    webhook = AlertAction(type="webhook", config={"url": WEBHOOK_URL})
    engine = AlertingEngine([rule(actions=[webhook])], http_client=httpx.AsyncClient())

    await engine.evaluate({"system.cpu.usage": 95})

    assert len(engine.active_alerts()) == 1


@pytest.mark.unit
def test_rate_limit_violations_are_deltas():
    clock = FakeClock()
    limiter = RateLimiter(window_seconds=60, max_requests=1, clock=clock)
    engine = AlertingEngine([], rate_limiter=limiter, request_stats=RequestStats())

    for _ in range(4):
        limiter.is_allowed("ip")
    first = engine.collect_metrics()
    limiter.is_allowed("ip")
    second = engine.collect_metrics()

    assert first["security.rate_limit.violations"] == 3
    assert second["security.rate_limit.violations"] == 1
    assert "system.memory.percentage" in first
    assert first["system.errors.rate"] == 0.0


@pytest.mark.unit
def test_disabled_rules_are_skipped():
    engine = AlertingEngine([rule(enabled=False), rule(id="other")])
    assert list(engine.rules) == ["other"]

    engine.remove_rule("other")
    assert engine.rules == {}
