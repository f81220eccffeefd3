"""
Alerting Engine
Threshold and anomaly rules evaluated against service metrics on a timer.
"""

import asyncio
import math
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Literal

import httpx
import psutil
from pydantic import Field

from ..core import ApiModel, NotFoundError, RateLimiter, get_logger
from ..monitoring import RequestStats, metrics_collector
from ..providers import ProviderChain, now_utc

logger = get_logger(__name__)

AlertCondition = Literal["above", "below", "equals", "anomaly"]
AlertSeverity = Literal["info", "warning", "error", "critical"]
AlertStatus = Literal["active", "acknowledged"]

HISTORY_SIZE = 100
MIN_ANOMALY_SAMPLES = 10


class AlertAction(ApiModel):
    type: Literal["log", "webhook"]
    config: dict[str, Any] = Field(default_factory=dict)


class AlertRule(ApiModel):
    """
    A metric condition worth telling someone about.

    ``duration`` and ``cooldown`` are in seconds. For ``anomaly`` rules the
    threshold is a number of standard deviations.
    """

    id: str
    name: str
    description: str
    metric: str
    condition: AlertCondition
    threshold: float
    duration: float = 0.0
    severity: AlertSeverity = "warning"
    tags: list[str] = Field(default_factory=list)
    enabled: bool = True
    actions: list[AlertAction] = Field(default_factory=lambda: [AlertAction(type="log")])
    cooldown: float = 300.0


class Alert(ApiModel):
    """Alert as served by the API and the operations feed."""

    id: str
    severity: AlertSeverity
    title: str
    message: str
    timestamp: datetime
    acknowledged: bool
    current_value: float
    threshold: float
    tags: list[str]


@dataclass
class ActiveAlert:
    rule: AlertRule
    triggered_at: datetime
    last_notified: float
    current_value: float
    message: str
    status: AlertStatus = "active"

    def to_alert(self) -> Alert:
        return Alert(
            id=self.rule.id,
            severity=self.rule.severity,
            title=self.rule.name,
            message=self.message,
            timestamp=self.triggered_at,
            acknowledged=self.status == "acknowledged",
            current_value=self.current_value,
            threshold=self.rule.threshold,
            tags=list(self.rule.tags),
        )


def default_rules(webhook_url: str | None = None) -> list[AlertRule]:
    """Built-in rule set. The provider-failure rule also posts to ``webhook_url`` when set."""
    provider_actions = [AlertAction(type="log")]
    if webhook_url:
        provider_actions.append(AlertAction(type="webhook", config={"url": webhook_url}))

    return [
        AlertRule(
            id="high-error-rate",
            name="High Error Rate",
            description="Error rate exceeds 5%",
            metric="system.errors.rate",
            condition="above",
            threshold=5,
            duration=300,
            severity="critical",
            tags=["reliability", "errors"],
            cooldown=900,
        ),
        AlertRule(
            id="high-response-time",
            name="High Response Time",
            description="Average response time exceeds 3 seconds",
            metric="system.response.time.avg",
            condition="above",
            threshold=3000,
            duration=180,
            severity="warning",
            tags=["performance", "latency"],
            cooldown=600,
        ),
        AlertRule(
            id="high-memory-usage",
            name="High Memory Usage",
            description="Memory usage exceeds 85%",
            metric="system.memory.percentage",
            condition="above",
            threshold=85,
            duration=600,
            severity="error",
            tags=["infrastructure", "memory"],
            cooldown=1800,
        ),
        AlertRule(
            id="ai-provider-failures",
            name="AI Provider Failures",
            description="AI provider error rate exceeds 10%",
            metric="ai.provider.error.rate",
            condition="above",
            threshold=10,
            duration=120,
            severity="error",
            tags=["ai", "providers"],
            actions=provider_actions,
            cooldown=300,
        ),
        AlertRule(
            id="rate-limit-exceeded",
            name="Rate Limit Exceeded",
            description="Rate limit violations exceed 50 per minute",
            metric="security.rate_limit.violations",
            condition="above",
            threshold=50,
            duration=60,
            severity="warning",
            tags=["security", "rate-limit"],
            cooldown=300,
        ),
        AlertRule(
            id="anomaly-detection",
            name="Traffic Anomaly",
            description="Unusual traffic patterns detected",
            metric="system.requests.rate",
            condition="anomaly",
            threshold=3,
            duration=300,
            severity="info",
            tags=["security", "anomaly"],
            cooldown=3600,
        ),
    ]


AlertListener = Callable[[Alert], None]


class AlertingEngine:
    """
    Evaluates rules against metric snapshots and tracks active alerts.

    At most one alert per rule is active. An alert is resolved (and removed)
    once its condition stops holding, unless it was acknowledged; while the
    condition keeps holding, actions re-run only after the rule's cooldown.
    """

    def __init__(
        self,
        rules: list[AlertRule] | None = None,
        request_stats: RequestStats | None = None,
        chain: ProviderChain | None = None,
        rate_limiter: RateLimiter | None = None,
        http_client: httpx.AsyncClient | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.rules: dict[str, AlertRule] = {}
        for rule in default_rules() if rules is None else rules:
            if rule.enabled:
                self.rules[rule.id] = rule

        self.request_stats = request_stats
        self.chain = chain
        self.rate_limiter = rate_limiter
        self._http = http_client
        self._owns_http = http_client is None
        self._clock = clock

        self._active: dict[str, ActiveAlert] = {}
        self._history: dict[str, deque[float]] = {}
        self._listeners: list[AlertListener] = []
        self._last_violations = 0
        logger.info("alert_rules_loaded", rules=len(self.rules))

    def collect_metrics(self) -> dict[str, float]:
        """Current values for every metric the default rules know about."""
        metrics: dict[str, float] = {
            "system.memory.percentage": psutil.virtual_memory().percent,
            "system.cpu.usage": psutil.cpu_percent(interval=None),
        }

        if self.request_stats is not None:
            metrics["system.errors.rate"] = self.request_stats.error_rate
            metrics["system.response.time.avg"] = self.request_stats.avg_response_time
            metrics["system.requests.rate"] = self.request_stats.requests_per_minute

        if self.chain is not None:
            metrics["ai.provider.error.rate"] = self.chain.error_rate

        if self.rate_limiter is not None:
            # Violations since the previous collection
            violations = self.rate_limiter.violations
            metrics["security.rate_limit.violations"] = float(max(0, violations - self._last_violations))
            self._last_violations = violations

        return metrics

    def history(self, metric: str) -> list[float]:
        return list(self._history.get(metric, ()))

    def _record(self, metrics: dict[str, float]) -> None:
        for key, value in metrics.items():
            self._history.setdefault(key, deque(maxlen=HISTORY_SIZE)).append(value)

    def detect_anomaly(self, metric: str, value: float, deviations: float) -> bool:
        history = self._history.get(metric, ())
        if len(history) < MIN_ANOMALY_SAMPLES:
            return False

        mean = sum(history) / len(history)
        variance = sum((x - mean) ** 2 for x in history) / len(history)
        return abs(value - mean) > math.sqrt(variance) * deviations

    def check_condition(self, rule: AlertRule, value: float) -> bool:
        if rule.condition == "above":
            return value > rule.threshold
        if rule.condition == "below":
            return value < rule.threshold
        if rule.condition == "equals":
            return value == rule.threshold
        if rule.condition == "anomaly":
            return self.detect_anomaly(rule.metric, value, rule.threshold)
        return False

    async def evaluate(self, metrics: dict[str, float]) -> None:
        """Record the snapshot in the metric histories and run every rule against it."""
        self._record(metrics)

        for rule in list(self.rules.values()):
            value = metrics.get(rule.metric)
            if value is None:
                continue
            try:
                await self._evaluate_rule(rule, value)
            except Exception as e:
                logger.error("alert_rule_failed", rule=rule.id, error=str(e))

        metrics_collector.set_active_alerts(len(self._active))

    async def _evaluate_rule(self, rule: AlertRule, value: float) -> None:
        firing = self.check_condition(rule, value)
        active = self._active.get(rule.id)

        if firing and active is None:
            await self._trigger(rule, value)
        elif active is not None and active.status == "active":
            if firing:
                await self._update(active, value)
            else:
                await self._resolve(active)

    async def _trigger(self, rule: AlertRule, value: float) -> None:
        alert = ActiveAlert(
            rule=rule,
            triggered_at=now_utc(),
            last_notified=self._clock(),
            current_value=value,
            message=f"{rule.name}: {rule.description}. Current value: {value:g}, Threshold: {rule.threshold:g}",
        )
        self._active[rule.id] = alert
        logger.info("alert_triggered", rule=rule.id, severity=rule.severity, value=value)

        await self._run_actions(alert)
        self._notify(alert.to_alert())

    async def _update(self, alert: ActiveAlert, value: float) -> None:
        alert.current_value = value
        now = self._clock()
        if now - alert.last_notified < alert.rule.cooldown:
            return
        alert.last_notified = now
        await self._run_actions(alert)

    async def _resolve(self, alert: ActiveAlert) -> None:
        del self._active[alert.rule.id]
        logger.info("alert_resolved", rule=alert.rule.id)
        await self._run_actions(alert, resolved=True)

    async def _run_actions(self, alert: ActiveAlert, resolved: bool = False) -> None:
        for action in alert.rule.actions:
            try:
                if action.type == "log":
                    self._log_action(alert, resolved)
                elif action.type == "webhook":
                    await self._webhook_action(action, alert, resolved)
            except Exception as e:
                logger.error("alert_action_failed", action=action.type, rule=alert.rule.id, error=str(e))

    def _log_action(self, alert: ActiveAlert, resolved: bool) -> None:
        logger.warning(
            "alert_resolved_notice" if resolved else "alert_notice",
            rule=alert.rule.id,
            title=alert.rule.name,
            severity=alert.rule.severity,
            message=alert.message,
            value=alert.current_value,
            threshold=alert.rule.threshold,
        )

    async def _webhook_action(self, action: AlertAction, alert: ActiveAlert, resolved: bool) -> None:
        url = action.config.get("url")
        if not url:
            return

        if self._http is None:
            self._http = httpx.AsyncClient(timeout=10.0)
        payload = {
            "alert": {
                "id": alert.rule.id,
                "name": alert.rule.name,
                "severity": alert.rule.severity,
                "message": alert.message,
                "value": alert.current_value,
                "threshold": alert.rule.threshold,
                "triggeredAt": alert.triggered_at.isoformat(),
                "tags": alert.rule.tags,
                "status": "resolved" if resolved else alert.status,
            }
        }
        try:
            response = await self._http.post(url, json=payload, headers=action.config.get("headers") or {})
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("alert_webhook_failed", url=url, rule=alert.rule.id, error=str(e))

    def _notify(self, alert: Alert) -> None:
        for listener in list(self._listeners):
            try:
                listener(alert)
            except Exception as e:
                logger.error("alert_listener_failed", error=str(e))

    def subscribe(self, listener: AlertListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: AlertListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def add_rule(self, rule: AlertRule) -> None:
        self.rules[rule.id] = rule

    def remove_rule(self, rule_id: str) -> None:
        self.rules.pop(rule_id, None)
        self._active.pop(rule_id, None)

    def active_alerts(self) -> list[Alert]:
        return [alert.to_alert() for alert in self._active.values()]

    def acknowledge(self, alert_id: str) -> Alert:
        """
        Mark an active alert acknowledged.

        Raises:
            NotFoundError: No active alert with that id
        """
        alert = self._active.get(alert_id)
        if alert is None:
            raise NotFoundError("Alert not found", code="ALERT_NOT_FOUND")
        alert.status = "acknowledged"
        logger.info("alert_acknowledged", rule=alert_id)
        return alert.to_alert()

    async def check(self) -> None:
        await self.evaluate(self.collect_metrics())

    async def run(self, interval: float = 30.0) -> None:
        """Evaluate on a fixed interval until cancelled."""
        logger.info("alerting_started", interval=interval)
        try:
            while True:
                try:
                    await self.check()
                except Exception as e:
                    logger.error("alert_check_failed", error=str(e))
                await asyncio.sleep(interval)
        finally:
            logger.info("alerting_stopped")

    async def close(self) -> None:
        if self._http is not None and self._owns_http:
            await self._http.aclose()
        self._http = None
