"""Monitoring: Prometheus metrics and rolling request statistics."""

from .metrics import MetricsCollector, metrics_collector
from .requests import RequestStats

__all__ = ["MetricsCollector", "metrics_collector", "RequestStats"]
