"""
Metrics Collection
Prometheus metrics for generation, providers and HTTP traffic
"""

import time

from prometheus_client import Counter, Gauge, Histogram, Summary, generate_latest


class MetricsCollector:
    """
    Collects and exposes Prometheus metrics for the service.
    """

    def __init__(self) -> None:
        # Generation metrics
        self.generation_requests_total = Counter(
            "vrux_generation_requests_total",
            "Total number of component generation requests",
            ["status", "method"],
        )
        self.generation_duration = Histogram(
            "vrux_generation_duration_seconds",
            "Component generation duration in seconds",
            ["method"],
            buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0],
        )
        self.generation_tokens = Summary(
            "vrux_generation_tokens",
            "Number of tokens in component generation",
            ["direction"],
        )
        self.generation_quality = Histogram(
            "vrux_generation_quality_score",
            "Heuristic quality score of generated components",
            buckets=[10, 20, 30, 40, 50, 60, 70, 80, 90, 100],
        )

        # Provider metrics
        self.provider_calls_total = Counter(
            "vrux_provider_calls_total",
            "Total number of AI provider calls",
            ["provider", "status"],
        )
        self.provider_duration = Histogram(
            "vrux_provider_duration_seconds",
            "AI provider call duration in seconds",
            ["provider"],
            buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0],
        )

        # Cache metrics
        self.cache_hits = Counter(
            "vrux_cache_hits_total",
            "Total number of cache hits",
            ["cache_type"],
        )
        self.cache_misses = Counter(
            "vrux_cache_misses_total",
            "Total number of cache misses",
            ["cache_type"],
        )

        # Stream metrics
        self.stream_events = Counter(
            "vrux_stream_events_total",
            "Total number of SSE events sent",
            ["type"],
        )

        # HTTP metrics
        self.http_requests_total = Counter(
            "vrux_http_requests_total",
            "Total number of HTTP requests",
            ["method", "path", "status"],
        )
        self.http_duration = Histogram(
            "vrux_http_duration_seconds",
            "HTTP request duration in seconds",
            ["method"],
            buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0],
        )
        self.rate_limited_total = Counter(
            "vrux_rate_limited_total",
            "Requests rejected by the rate limiter",
        )

        # Operations metrics
        self.ws_connections = Gauge(
            "vrux_ws_connections",
            "Open operations dashboard WebSocket connections",
        )
        self.active_alerts = Gauge(
            "vrux_active_alerts",
            "Currently active alerts",
        )

        # Error metrics
        self.errors_total = Counter(
            "vrux_errors_total",
            "Total number of errors",
            ["error_type", "component"],
        )

        # System metrics
        self.uptime = Gauge(
            "vrux_uptime_seconds",
            "Service uptime in seconds",
        )
        self.start_time = time.time()

    def record_generation(self, status: str, duration: float, method: str = "generate") -> None:
        """Record a generation request."""
        self.generation_requests_total.labels(status=status, method=method).inc()
        self.generation_duration.labels(method=method).observe(duration)

    def record_generation_tokens(self, input_tokens: int, output_tokens: int) -> None:
        self.generation_tokens.labels(direction="input").observe(input_tokens)
        self.generation_tokens.labels(direction="output").observe(output_tokens)

    def record_quality(self, score: int) -> None:
        self.generation_quality.observe(score)

    def record_provider_call(self, provider: str, status: str, duration: float) -> None:
        """Record an AI provider call."""
        self.provider_calls_total.labels(provider=provider, status=status).inc()
        self.provider_duration.labels(provider=provider).observe(duration)

    def record_cache_hit(self, cache_type: str) -> None:
        self.cache_hits.labels(cache_type=cache_type).inc()

    def record_cache_miss(self, cache_type: str) -> None:
        self.cache_misses.labels(cache_type=cache_type).inc()

    def record_stream_event(self, event_type: str) -> None:
        self.stream_events.labels(type=event_type).inc()

    def record_http_request(self, method: str, path: str, status: int, duration: float) -> None:
        """Record an HTTP request."""
        self.http_requests_total.labels(method=method, path=path, status=str(status)).inc()
        self.http_duration.labels(method=method).observe(duration)

    def record_rate_limited(self) -> None:
        self.rate_limited_total.inc()

    def set_ws_connections(self, count: int) -> None:
        self.ws_connections.set(count)

    def set_active_alerts(self, count: int) -> None:
        self.active_alerts.set(count)

    def record_error(self, error_type: str, component: str) -> None:
        """Record an error."""
        self.errors_total.labels(error_type=error_type, component=component).inc()

    def update_uptime(self) -> None:
        self.uptime.set(time.time() - self.start_time)

    @property
    def uptime_seconds(self) -> float:
        return time.time() - self.start_time

    def get_metrics(self) -> bytes:
        """Get metrics in Prometheus format."""
        self.update_uptime()
        return generate_latest()


# Global metrics collector instance
metrics_collector = MetricsCollector()
