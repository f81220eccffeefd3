"""Operations telemetry: host metrics, service health, alerting and the live feed."""

from .metrics import (
    SystemMetrics,
    SystemSampler,
    RollingWindow,
    MetricHistory,
    collect_system_metrics,
)
from .services import ServiceHealth, ServiceMonitor, service_health
from .alerts import Alert, AlertAction, AlertRule, AlertingEngine, default_rules
from .feed import DashboardFeed

__all__ = [
    "SystemMetrics",
    "SystemSampler",
    "RollingWindow",
    "MetricHistory",
    "collect_system_metrics",
    "ServiceHealth",
    "ServiceMonitor",
    "service_health",
    "Alert",
    "AlertAction",
    "AlertRule",
    "AlertingEngine",
    "default_rules",
    "DashboardFeed",
]
